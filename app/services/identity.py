"""
Identity provider: user accounts and session issuance.

The verifier only needs ``session_for_verified_email``; the mint/redeem pair
behind it is the provider's passwordless sign-in primitive, used here purely
to open a session server-side (the token is never emailed).
"""

import datetime as dt
import logging
from typing import Optional, Protocol

from jose import JWTError
from tortoise.exceptions import BaseORMException, IntegrityError

from app.config import settings
from app.core.errors import AuthError, SessionMintError
from app.models.session import Session
from app.models.user import User
from app.schemas.auth import SessionOut, UserOut
from app.services.security import create_access_token, create_signin_token, decode_signin_token
from app.services.tokens import generate_token

log = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    async def find_user_by_email(self, email: str) -> Optional[User]: ...

    async def create_user(self, email: str, email_verified: bool = True) -> User: ...

    async def mint_one_time_token(self, email: str) -> str: ...

    async def redeem_token(self, email: str, token: str) -> SessionOut: ...

    async def session_for_verified_email(self, email: str) -> SessionOut: ...


class LocalIdentityProvider:
    """Users and sessions stored in our own database, access tokens signed with JWT_SECRET."""

    def __init__(self, link_ttl_seconds: int | None = None, session_days: int | None = None):
        self.link_ttl_seconds = link_ttl_seconds or settings.LINK_TOKEN_TTL_SECONDS
        self.session_lifetime = dt.timedelta(days=session_days or settings.SESSION_DAYS)

    async def find_user_by_email(self, email: str) -> Optional[User]:
        return await User.get_or_none(email=email.lower())

    async def create_user(self, email: str, email_verified: bool = True) -> User:
        email = email.lower()
        try:
            user = await User.create(email=email, email_verified=email_verified)
        except IntegrityError:
            # Lost a race with a concurrent sign-up; the unique email wins
            user = await User.get(email=email)
        log.info("Provisioned user %s for %s", user.id, email)
        return user

    async def mint_one_time_token(self, email: str) -> str:
        if await self.find_user_by_email(email) is None:
            raise SessionMintError("Failed to generate session: user not found")
        return create_signin_token(email.lower(), self.link_ttl_seconds)

    async def redeem_token(self, email: str, token: str) -> SessionOut:
        try:
            claims = decode_signin_token(token)
        except JWTError as exc:
            raise SessionMintError(f"Failed to create session: {exc}") from exc
        if claims.get("sub") != email.lower():
            raise SessionMintError("Failed to create session: token does not match email")

        user = await self.find_user_by_email(email)
        if user is None:
            raise SessionMintError("Failed to create session: user not found")
        try:
            # link_jti is unique, so a sign-in token can open at most one session
            session = await self._open_session(user, link_jti=claims["jti"])
        except IntegrityError as exc:
            raise SessionMintError("Failed to create session: token already used") from exc

        user.last_sign_in_at = dt.datetime.now(dt.timezone.utc)
        await user.save(update_fields=["last_sign_in_at", "modified_at"])
        return self._bundle(user, session)

    async def session_for_verified_email(self, email: str) -> SessionOut:
        try:
            token = await self.mint_one_time_token(email)
            return await self.redeem_token(email, token)
        except SessionMintError:
            raise
        except (BaseORMException, ValueError) as exc:
            raise SessionMintError(f"Failed to create session: {exc}") from exc

    async def refresh(self, refresh_token: str) -> SessionOut:
        """Exchange a refresh token for a new session, retiring the old one."""
        now = dt.datetime.now(dt.timezone.utc)
        session = await Session.get_or_none(token=refresh_token, revoked=False)
        if not session or (session.expires_at and session.expires_at < now):
            raise AuthError()
        if not await Session.filter(id=session.id, revoked=False).update(revoked=True):
            raise AuthError()
        user = await session.user
        replacement = await self._open_session(user, link_jti=generate_token(24))
        return self._bundle(user, replacement)

    async def revoke_sessions(self, user_id: str) -> int:
        return await Session.filter(user_id=user_id, revoked=False).update(revoked=True)

    async def _open_session(self, user: User, link_jti: str) -> Session:
        return await Session.create(
            user=user,
            token=generate_token(32),
            link_jti=link_jti,
            revoked=False,
            expires_at=dt.datetime.now(dt.timezone.utc) + self.session_lifetime,
        )

    def _bundle(self, user: User, session: Session) -> SessionOut:
        access_token, expires_at = create_access_token(str(user.id), str(session.id))
        return SessionOut(
            access_token=access_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRES_MIN * 60,
            expires_at=expires_at,
            refresh_token=session.token,
            user=UserOut(
                id=user.id,
                email=user.email,
                email_verified=user.email_verified,
                created_at=user.created_at,
            ),
        )
