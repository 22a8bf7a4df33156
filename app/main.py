# Top imports
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import settings
from app.core.errors import GeoSnapError
from app.core.middleware import SecurityHeadersMiddleware, ErrorEnvelopeMiddleware
from app.core.rate_limit import limiter
from app.db import init_db, close_db
from app.routers import router
from app.services.metrics import metrics_middleware, metrics_endpoint
from app.services.observability import init_observability

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
log = logging.getLogger("geosnap")

# Method: lifespan()
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("Starting GeoSnap application...")
    # Secret guard for production deployments
    env = (settings.APP_ENV or "").strip().lower()
    if env == "production":
        v = settings.JWT_SECRET or ""
        if v in ("", "dev", "CHANGE_ME") or len(v) < 32 or v.startswith("dev-"):
            raise RuntimeError("Insecure JWT_SECRET; set a real secret in production")
        if not settings.RESEND_API_KEY:
            log.warning("RESEND_API_KEY is not set; verification emails will fail")
    init_observability(env)
    await init_db()

    yield

    # Shutdown
    log.info("Shutting down GeoSnap application...")
    await close_db()
    log.info("Database connections closed")

app = FastAPI(
    title="GeoSnap API",
    description="Email one-time-code sign-in and location verification for GeoSnap",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Every failure leaves the service as {"error": message}
@app.exception_handler(GeoSnapError)
async def geosnap_error_handler(request: Request, exc: GeoSnapError):
    if exc.status_code >= 500:
        log.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": problems or "Invalid request"})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(router)
log.info("Registered routes count: %s", len(app.routes))

# Middleware setup
app.add_middleware(GZipMiddleware, minimum_size=1024)
app.add_middleware(ErrorEnvelopeMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# After middleware setup
app.add_middleware(SecurityHeadersMiddleware)

# Enable Prometheus metrics if METRICS_ENABLED=1
metrics_middleware(app)

@app.get("/metrics")
async def prometheus_metrics():
    return await metrics_endpoint()

# Universal health endpoint (always present)
@app.get("/health")
async def health():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
