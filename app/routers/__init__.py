from fastapi import APIRouter
import logging

def build_router() -> APIRouter:
    router = APIRouter()
    log = logging.getLogger("routers")

    from .auth import router as auth_router
    router.include_router(auth_router)
    log.info("Loaded router: auth")

    from .location import router as location_router
    router.include_router(location_router)
    log.info("Loaded router: location")

    from .health import router as health_router
    router.include_router(health_router)
    log.info("Loaded router: health")

    return router

# Export module-level router so app.main can import it
router = build_router()
