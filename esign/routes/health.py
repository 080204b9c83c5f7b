"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from esign.core.config import settings
from esign.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Liveness check."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check():
    """Readiness check. The database is required; collaborators are reported only."""
    checks = {}
    all_ok = True

    # Check database
    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("Readiness database check failed: %s", e)
        checks["database"] = f"error: {e}"
        all_ok = False

    checks["ai_assist"] = "configured" if settings.OPENAI_API_KEY else "not configured"
    checks["payments"] = (
        "configured" if settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET else "not configured"
    )

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )
