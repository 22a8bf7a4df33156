"""
Observability service: optional Sentry error reporting
"""
import os
import logging

import sentry_sdk

logger = logging.getLogger(__name__)

def init_observability(app_env: str = "development") -> bool:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        environment=app_env,
        # Addresses and codes must not leave the service
        send_default_pii=False,
    )
    logger.info("Sentry initialized")
    return True
