from slowapi import Limiter
from slowapi.util import get_remote_address
from app.config import settings

# Default IP-based key. Disabled with RATE_LIMIT_ENABLED=0 (tests).
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
)
