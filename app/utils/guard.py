# app/utils/guard.py
from email_validator import validate_email, EmailNotValidError
from app.core.errors import ValidationError


def normalize_email(raw, required_message: str = "Email is required") -> str:
    """Strip and lower-case an address, rejecting empty or malformed input"""
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError(required_message)
    email = raw.strip().lower()
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError(f"Invalid email address: {exc}") from exc
    return email


def require_code(raw, required_message: str = "Email and code are required") -> str:
    """Codes are compared verbatim, so only presence is checked here"""
    if not isinstance(raw, str) or not raw:
        raise ValidationError(required_message)
    return raw
