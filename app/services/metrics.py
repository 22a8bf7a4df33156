"""
Prometheus metrics service for GeoSnap
Provides monitoring and observability for the application
"""

import time
import os
from fastapi import Request
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUESTS_TOTAL = Counter(
    "geosnap_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"]
)

REQUEST_DURATION = Histogram(
    "geosnap_http_request_seconds",
    "Request duration in seconds",
    ["method", "path"]
)

OTP_ISSUED = Counter(
    "geosnap_otp_issued_total",
    "Verification codes issued",
    ["status"]
)

OTP_VERIFIED = Counter(
    "geosnap_otp_verified_total",
    "Verification attempts",
    ["status"]
)

SPOOF_VERDICTS = Counter(
    "geosnap_spoof_verdicts_total",
    "Location spoofing verdicts by confidence",
    ["confidence"]
)

# Check if metrics are enabled
ENABLED = os.getenv("METRICS_ENABLED") == "1"

async def metrics_endpoint():
    """Prometheus metrics endpoint"""
    if not ENABLED:
        return Response(b"metrics disabled", media_type="text/plain")
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

def metrics_middleware(app):
    """Add metrics middleware to FastAPI app"""
    if not ENABLED:
        return

    @app.middleware("http")
    async def _metrics(request: Request, call_next):
        start = time.time()
        response = await call_next(request)

        path = request.url.path
        REQUESTS_TOTAL.labels(
            method=request.method,
            path=path,
            status=str(response.status_code)
        ).inc()

        REQUEST_DURATION.labels(
            method=request.method,
            path=path
        ).observe(time.time() - start)

        return response

def record_otp_issued(status: str):
    if ENABLED:
        OTP_ISSUED.labels(status=status).inc()

def record_otp_verified(status: str):
    if ENABLED:
        OTP_VERIFIED.labels(status=status).inc()

def record_spoof_verdict(confidence: str):
    if ENABLED:
        SPOOF_VERDICTS.labels(confidence=confidence).inc()
