"""
Health Router - liveness and readiness probes
"""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def health_live():
    """Liveness probe: server process is up"""
    return {"status": "live"}


@router.get("/ready")
async def health_ready(request: Request):
    """Readiness probe: database answers queries"""
    db = getattr(request.app.state, "db", None)
    ready = False
    if db is not None and db.is_initialized:
        try:
            ready = await db.ping()
        except Exception:
            logger.exception("Readiness check failed")
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not_ready", "database": ready},
    )
