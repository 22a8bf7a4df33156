import logging

from tortoise.exceptions import BaseORMException

from app.core.errors import InvalidOrExpiredError, SessionMintError
from app.schemas.auth import SessionOut
from app.services import metrics
from app.services.identity import IdentityProvider
from app.services.otp_store import OtpStore, utcnow
from app.utils.guard import normalize_email, require_code

log = logging.getLogger(__name__)


class OtpVerifier:
    def __init__(self, store: OtpStore, identity: IdentityProvider):
        self.store = store
        self.identity = identity

    async def verify(self, raw_email, raw_code) -> SessionOut:
        """Consume a code and open a session for its address.

        Wrong, already used and expired codes all raise the same
        InvalidOrExpiredError. The code is consumed before the session is
        minted, so a SessionMintError means the user needs a new code.
        """
        email = normalize_email(raw_email, "Email and code are required")
        code = require_code(raw_code)

        record = await self.store.find_latest_valid(email, code, utcnow())
        if record is None or not await self.store.claim(record):
            metrics.record_otp_verified("invalid")
            raise InvalidOrExpiredError()

        try:
            user = await self.identity.find_user_by_email(email)
            if user is None:
                user = await self.identity.create_user(email, email_verified=True)
            session = await self.identity.session_for_verified_email(email)
        except SessionMintError:
            metrics.record_otp_verified("session_error")
            raise
        except BaseORMException as exc:
            metrics.record_otp_verified("session_error")
            log.error("Identity lookup failed for %s: %s", email, exc)
            raise SessionMintError(f"Failed to create user: {exc}") from exc

        metrics.record_otp_verified("ok")
        log.info("Verified %s as user %s", email, user.id)
        return session
