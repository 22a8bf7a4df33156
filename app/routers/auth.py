from fastapi import APIRouter, Body, Depends, Request
import logging

from app.config import settings
from app.core.errors import AuthError, ValidationError
from app.core.rate_limit import limiter
from app.models.user import User
from app.schemas.auth import (
    RefreshPayload,
    SendOtpOut,
    SendOtpPayload,
    SessionOut,
    UserOut,
    VerifyOtpOut,
    VerifyOtpPayload,
)
from app.services.emailer import EmailTransport, ResendTransport
from app.services.identity import LocalIdentityProvider
from app.services.otp_issuer import OtpIssuer
from app.services.otp_store import OtpStore
from app.services.otp_verifier import OtpVerifier
from app.services.security import AuthUser, require_user

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# Collaborators are dependencies so tests can swap them out
def get_otp_store() -> OtpStore:
    return OtpStore()

def get_email_transport() -> EmailTransport:
    return ResendTransport()

def get_identity_provider() -> LocalIdentityProvider:
    return LocalIdentityProvider()

def get_otp_issuer(
    store: OtpStore = Depends(get_otp_store),
    transport: EmailTransport = Depends(get_email_transport),
) -> OtpIssuer:
    return OtpIssuer(store, transport)

def get_otp_verifier(
    store: OtpStore = Depends(get_otp_store),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
) -> OtpVerifier:
    return OtpVerifier(store, identity)


@router.post("/send-otp", response_model=SendOtpOut)
@limiter.limit(settings.OTP_RATE_LIMIT)
async def send_otp(
    request: Request,
    payload: SendOtpPayload = Body(...),
    issuer: OtpIssuer = Depends(get_otp_issuer),
):
    """Email a fresh 6-digit code; earlier unused codes for the address stop working."""
    await issuer.issue(payload.email)
    return SendOtpOut()


@router.post("/verify-otp", response_model=VerifyOtpOut)
@limiter.limit(settings.OTP_RATE_LIMIT)
async def verify_otp(
    request: Request,
    payload: VerifyOtpPayload = Body(...),
    verifier: OtpVerifier = Depends(get_otp_verifier),
):
    """Trade an email + code for a session."""
    session = await verifier.verify(payload.email, payload.code)
    return VerifyOtpOut(session=session)


@router.post("/refresh", response_model=SessionOut)
@limiter.limit("20/minute")
async def refresh_session(
    request: Request,
    payload: RefreshPayload = Body(...),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
):
    if not payload.refresh_token:
        raise ValidationError("refresh_token is required")
    return await identity.refresh(payload.refresh_token)


@router.post("/logout")
async def logout(
    auth: AuthUser = Depends(require_user),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
):
    """Sign out everywhere: revokes every open session of the caller."""
    revoked = await identity.revoke_sessions(auth.user_id)
    log.info("User %s signed out (%s session(s) revoked)", auth.user_id, revoked)
    return {"success": True, "revoked": revoked}


@router.get("/me", response_model=UserOut)
async def get_current_user(auth: AuthUser = Depends(require_user)):
    user = await User.get_or_none(id=auth.user_id)
    if user is None:
        raise AuthError("User not found")
    return UserOut(
        id=user.id,
        email=user.email,
        email_verified=user.email_verified,
        created_at=user.created_at,
    )
