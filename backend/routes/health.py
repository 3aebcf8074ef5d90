"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check: no browser calls."""
    commit = request.app.state.settings.git_sha
    return {"status": "ok", "service": "shipping-assistant", "commit": commit}


@router.get("/health")
async def health(request: Request) -> dict:
    """Deep health check: browser connectivity and cache sizes."""
    pool = request.app.state.page_pool
    store = request.app.state.shipping.store

    result = {
        "status": "ok",
        "service": "shipping-assistant",
        "commit": request.app.state.settings.git_sha,
        "browser": "connected" if pool.is_connected else "disconnected",
        "cache": store.stats(),
    }
    if not pool.is_connected:
        logger.warning("Health check: browser is not connected")
        result["status"] = "degraded"

    return result
