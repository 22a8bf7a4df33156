import datetime as dt
import logging

from app.config import settings
from app.core.errors import DispatchError, StoreError
from app.services import metrics
from app.services.emailer import EmailTransport, render_otp_email
from app.services.otp_store import OtpStore, utcnow
from app.services.tokens import generate_otp
from app.utils.guard import normalize_email

log = logging.getLogger(__name__)


class OtpIssuer:
    def __init__(self, store: OtpStore, transport: EmailTransport, ttl_minutes: int | None = None):
        self.store = store
        self.transport = transport
        self.ttl = dt.timedelta(minutes=ttl_minutes if ttl_minutes is not None else settings.OTP_TTL_MINUTES)

    async def issue(self, raw_email) -> None:
        """Issue a fresh code for an address and email it.

        Any earlier unused code for the address stops being honoured. If
        sending fails the new code stays stored and valid; DispatchError is
        raised and the caller decides whether to ask again.
        """
        email = normalize_email(raw_email)
        code = generate_otp()
        expires_at = utcnow() + self.ttl

        try:
            await self.store.replace_outstanding(email, code, expires_at)
        except StoreError:
            metrics.record_otp_issued("store_error")
            raise

        subject, html = render_otp_email(code, int(self.ttl.total_seconds() // 60))
        try:
            await self.transport.send(email, subject, html)
        except DispatchError:
            metrics.record_otp_issued("dispatch_error")
            raise
        except Exception as exc:
            metrics.record_otp_issued("dispatch_error")
            raise DispatchError(f"Failed to send email: {exc}") from exc
        metrics.record_otp_issued("sent")
        log.info("Issued verification code for %s (expires %s)", email, expires_at.isoformat())
