"""
Persistence for issued one-time codes.

All database failures surface as StoreError so callers never see ORM types.
"""

import datetime as dt
import logging
from typing import Optional

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from app.core.errors import StoreError
from app.models.otp import OtpCode

log = logging.getLogger(__name__)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class OtpStore:
    async def replace_outstanding(self, email: str, code: str, expires_at: dt.datetime) -> OtpCode:
        """Invalidate every unused code for ``email`` and insert a fresh one.

        Both writes share one transaction, so concurrent issuance for the same
        address cannot leave two live rows behind.
        """
        try:
            async with in_transaction() as conn:
                invalidated = await OtpCode.filter(email=email, used=False).using_db(conn).update(used=True)
                record = await OtpCode.create(
                    email=email,
                    code=code,
                    expires_at=expires_at,
                    used=False,
                    using_db=conn,
                )
        except BaseORMException as exc:
            log.error("Failed to store OTP for %s: %s", email, exc)
            raise StoreError() from exc
        if invalidated:
            log.info("Invalidated %s outstanding code(s) for %s", invalidated, email)
        return record

    async def find_latest_valid(self, email: str, code: str, now: Optional[dt.datetime] = None) -> Optional[OtpCode]:
        now = now or utcnow()
        try:
            return await (
                OtpCode.filter(email=email, code=code, used=False, expires_at__gte=now)
                .order_by("-created_at", "-id")
                .first()
            )
        except BaseORMException as exc:
            log.error("OTP lookup failed for %s: %s", email, exc)
            raise StoreError("Could not check verification code") from exc

    async def claim(self, record: OtpCode) -> bool:
        """Flip ``used`` on one row, guarded by ``used=False``.

        Returns False when another request consumed the row first.
        """
        try:
            updated = await OtpCode.filter(id=record.id, used=False).update(used=True)
        except BaseORMException as exc:
            log.error("OTP update failed: %s", exc)
            raise StoreError("Could not check verification code") from exc
        if updated:
            record.used = True
        return bool(updated)
