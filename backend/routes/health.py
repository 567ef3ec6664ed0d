"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

from config import settings
from services.swapi_client import UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "starwars-catalog-api", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Deep health check that verifies SWAPI connectivity."""
    result = {
        "status": "ok",
        "service": "starwars-catalog-api",
        "commit": settings.git_sha,
        "swapi": "not_tested",
        "cache_entries": request.app.state.cache.stats()["size"],
    }

    try:
        await request.app.state.swapi.ping()
        result["swapi"] = "connected"
    except UpstreamError as e:
        logger.warning("SWAPI health check failed: %s", e)
        result["swapi"] = "error"
        result["swapi_error"] = str(e)

    return result
