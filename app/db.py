import os
import asyncio
import logging
from tortoise import Tortoise
from app.config import settings

_logger = logging.getLogger("db")

MODELS = [
    "app.models.user",
    "app.models.session",
    "app.models.otp",
    "aerich.models",
]

def _tortoise_url_from_env() -> str:
    """Normalize database URL for Tortoise ORM and force SQLite for tests."""
    # During pytest, prefer a file-based SQLite DB to avoid per-connection
    # in-memory isolation issues that can hide writes across queries
    if "PYTEST_CURRENT_TEST" in os.environ:
        return "sqlite://./.test_db.sqlite3"

    # Local development runs on SQLite unless FORCE_LOCAL_SQLITE=0
    force_sqlite = os.environ.get("FORCE_LOCAL_SQLITE", "1") == "1"
    app_env = settings.APP_ENV.strip().lower()
    if force_sqlite and app_env not in ("prod", "production"):
        return "sqlite://./dev.db"

    url = settings.DATABASE_URL.strip().strip('"').strip("'")
    # Normalize to tortoise "postgres://" style
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgres://", 1)
    if not url.startswith("postgres://"):
        raise ValueError("PostgreSQL required. Set DATABASE_URL to postgres://...")
    return url

def build_tortoise_config() -> dict:
    return {
        "connections": {"default": _tortoise_url_from_env()},
        "apps": {
            "models": {
                "models": MODELS,
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }

# aerich entry point: `aerich init -t app.db.TORTOISE_ORM`
TORTOISE_ORM = build_tortoise_config()

async def init_db(max_retries: int = 3, delay_seconds: float = 0.5) -> None:
    """Initialize the database with retry logic in the current event loop.

    Schemas are generated in safe mode so an existing database is left alone.
    The last failure is re-raised once retries are exhausted.
    """
    config = build_tortoise_config()
    for attempt in range(1, max_retries + 1):
        try:
            await Tortoise.init(config=config)
            await Tortoise.generate_schemas(safe=True)
            _logger.info("Database initialized successfully")
            return
        except Exception as exc:
            if attempt == max_retries:
                _logger.error("Database unavailable after %s attempts: %s", attempt, exc)
                raise
            _logger.info(
                "DB init failed (attempt %s/%s): %s; retrying in %.1fs",
                attempt,
                max_retries,
                exc,
                delay_seconds,
            )
            await asyncio.sleep(delay_seconds)

async def close_db() -> None:
    """Close database connections in the current event loop."""
    await Tortoise.close_connections()
