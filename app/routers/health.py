from fastapi import APIRouter, Request
from tortoise import Tortoise
from tortoise.exceptions import BaseORMException
import time

router = APIRouter(prefix="/ops", tags=["ops"])

# Store startup time for uptime calculation
startup_time = time.time()

@router.get("/db-health")
async def db_health():
    """Simple database health check using Tortoise ORM"""
    try:
        await Tortoise.get_connection("default").execute_query("SELECT 1")
        return {"db_ok": True, "uptime_seconds": round(time.time() - startup_time, 2)}
    except (BaseORMException, KeyError) as e:
        return {"db_ok": False, "error": str(e)}

@router.get("/routes")
async def list_routes(request: Request):
    app = request.app
    routes = []
    for r in app.routes:
        path = getattr(r, "path", "")
        methods = list(getattr(r, "methods", []) or [])
        name = getattr(r, "name", "")
        routes.append({"path": path, "methods": methods, "name": name})
    return {"count": len(routes), "routes": routes}
