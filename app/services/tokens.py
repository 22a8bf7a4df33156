import secrets

OTP_MIN = 100000
OTP_MAX = 999999

def generate_token(nbytes: int = 32) -> str:
    return secrets.token_urlsafe(nbytes)

def generate_otp() -> str:
    """Uniform 6-digit code in 100000..999999 (no leading zero)."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))
