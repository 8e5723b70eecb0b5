"""
Health and banner endpoints
"""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from flockr import __version__

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def root(request: Request):
    return {
        "message": f"{request.app.state.settings.APP_NAME} API",
        "version": __version__,
        "status": "operational",
    }


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus a database ping."""
    try:
        await request.app.state.database.ping()
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "unavailable"},
        )
    return {"status": "ok", "database": "ok"}
