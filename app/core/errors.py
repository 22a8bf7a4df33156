"""
Error taxonomy for the OTP and session flows.

Every error carries the HTTP status it maps to at the request boundary and a
message that is safe to show to the caller.
"""


class GeoSnapError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GeoSnapError):
    """Malformed or missing input; surfaced verbatim."""
    status_code = 400
    default_message = "Invalid request"


class StoreError(GeoSnapError):
    """Persistence unavailable; safe to retry."""
    default_message = "Could not store verification code"


class DispatchError(GeoSnapError):
    """The code was stored but the email could not be sent."""
    default_message = "Could not send verification email"


class InvalidOrExpiredError(GeoSnapError):
    """Wrong, reused and expired codes all collapse into this one error."""
    status_code = 400
    default_message = "Invalid or expired code"


class SessionMintError(GeoSnapError):
    """Raised after the code was consumed; the user has to request a new one."""
    default_message = "Could not create session"


class AuthError(GeoSnapError):
    status_code = 401
    default_message = "Invalid or expired session"
