import datetime as dt
import uuid
from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.models.user import User
from app.models.session import Session

ALGORITHM = "HS256"
ACCESS_TYPE = "access"
SIGNIN_TYPE = "signin"

bearer = HTTPBearer(auto_error=False)


class AuthUser:
    def __init__(self, user_id: str, email: str, session_id: str):
        self.user_id = user_id
        self.email = email
        self.session_id = session_id


def _jwt_secret() -> str:
    secret = (settings.JWT_SECRET or "").strip()
    if len(secret) < 32:
        # In non-production, fall back to a safe dev secret to avoid 500s in tests
        if (settings.APP_ENV or "").strip().lower() != "production":
            return "dev-jwt-secret-change-me-very-long-32-chars-minimum"
        raise ValueError("JWT_SECRET must be at least 32 characters long")
    return secret


def create_access_token(user_id: str, session_id: str) -> tuple[str, int]:
    """Returns the signed token and its expiry as a unix timestamp."""
    now = dt.datetime.now(dt.timezone.utc)
    exp = int((now + dt.timedelta(minutes=settings.ACCESS_TOKEN_EXPIRES_MIN)).timestamp())
    payload = {"typ": ACCESS_TYPE, "sub": user_id, "sid": session_id, "iat": int(now.timestamp()), "exp": exp}
    return jwt.encode(payload, _jwt_secret(), algorithm=ALGORITHM), exp


# --- ONE-TIME SIGN-IN TOKENS ---
def create_signin_token(email: str, ttl_seconds: int) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "typ": SIGNIN_TYPE,
        "sub": email,
        "jti": uuid.uuid4().hex,
        "iat": int(now.timestamp()),
        "exp": int((now + dt.timedelta(seconds=ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm=ALGORITHM)


def decode_signin_token(token: str) -> dict:
    data = jwt.decode(token, _jwt_secret(), algorithms=[ALGORITHM])
    if data.get("typ") != SIGNIN_TYPE or not data.get("jti"):
        raise JWTError("Wrong token type")
    return data


async def require_user(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> AuthUser:
    if not creds or not creds.scheme.lower().startswith("bearer"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth")

    try:
        payload = jwt.decode(
            creds.credentials,
            _jwt_secret(),
            algorithms=[ALGORITHM],
            options={"leeway": 30},  # 30s clock skew tolerance
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if payload.get("typ") != ACCESS_TYPE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    # Signing out revokes the session, which retires its access tokens too
    session = await Session.get_or_none(id=payload.get("sid"), revoked=False)
    if not session:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session revoked")
    user = await User.get_or_none(id=payload["sub"])
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return AuthUser(str(user.id), user.email, str(session.id))
