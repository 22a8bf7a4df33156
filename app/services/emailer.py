# app/services/emailer.py
import logging
from typing import Protocol

import resend
from fastapi.concurrency import run_in_threadpool

from app.config import settings
from app.core.errors import DispatchError

log = logging.getLogger(__name__)


class EmailTransport(Protocol):
    async def send(self, to: str, subject: str, html: str) -> None: ...


class ResendTransport:
    """Sends mail through the Resend API. Failures raise DispatchError and are not retried."""

    def __init__(self, api_key: str | None = None, sender: str | None = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.EMAIL_FROM

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            raise DispatchError("RESEND_API_KEY not configured")
        resend.api_key = self.api_key
        params = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        # Emails.send is sync; run it in the threadpool so we can await it
        try:
            result = await run_in_threadpool(resend.Emails.send, params)
        except Exception as exc:
            log.warning("Resend rejected message to %s: %s", to, exc)
            raise DispatchError(f"Resend error: {exc}") from exc
        log.info("Sent verification email to %s (id=%s)", to, (result or {}).get("id"))


def render_otp_email(code: str, ttl_minutes: int, app_name: str | None = None) -> tuple[str, str]:
    app_name = app_name or settings.APP_NAME
    subject = f"{code} is your {app_name} verification code"
    html = f"""
      <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; max-width: 400px; margin: 0 auto; padding: 40px 20px;">
        <div style="text-align: center; margin-bottom: 32px;">
          <h1 style="font-size: 24px; color: #111; margin: 0;">{app_name}</h1>
          <p style="color: #666; margin-top: 4px;">Location-verified photos</p>
        </div>
        <div style="background: #f8f8f8; border-radius: 12px; padding: 32px; text-align: center;">
          <p style="color: #666; margin: 0 0 16px;">Your verification code is:</p>
          <div style="font-size: 36px; font-weight: 700; letter-spacing: 8px; color: #111; margin: 16px 0;">{code}</div>
          <p style="color: #999; font-size: 13px; margin: 16px 0 0;">This code expires in {ttl_minutes} minutes.</p>
        </div>
        <p style="color: #999; font-size: 12px; text-align: center; margin-top: 24px;">If you didn't request this code, you can safely ignore this email.</p>
      </div>
    """
    return subject, html
