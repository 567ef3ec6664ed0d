"""FastAPI application entry point for the Star Wars character catalog API."""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.swapi_client import SwapiClient

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=settings.log_level,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(cache: TTLCache | None = None, swapi: SwapiClient | None = None) -> FastAPI:
    """Build the app. ``cache`` and ``swapi`` can be injected for tests."""
    if cache is None:
        cache = TTLCache(
            default_ttl=settings.cache_default_ttl,
            sweep_interval=settings.cache_sweep_interval,
        )
    if swapi is None:
        swapi = SwapiClient(
            base_url=settings.swapi_base_url,
            cache=cache,
            timeout=settings.swapi_timeout,
            page_delay=settings.swapi_page_delay,
            all_characters_ttl=settings.all_characters_ttl,
            related_ttl=settings.related_cache_ttl,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        problems = settings.validate()
        if problems:
            logger.warning("Configuration problems: %s", "; ".join(problems))
        app.state.cache.start()
        logger.info("Using SWAPI at %s", settings.swapi_base_url)
        yield
        await app.state.cache.shutdown()
        await app.state.swapi.close()
        logger.info("Services shutdown complete")

    app = FastAPI(title="Star Wars Character API", version="1.0.0", lifespan=lifespan)
    app.state.cache = cache
    app.state.swapi = swapi

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Cache"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Request log
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.characters import router as characters_router

    app.include_router(health_router)
    app.include_router(characters_router)

    return app


app = create_app()
