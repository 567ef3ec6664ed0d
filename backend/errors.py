"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from envelope import failure

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception with HTTP status code and machine-readable error code."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_SERVER_ERROR"):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class ValidationError(CatalogError):
    def __init__(self, message: str, code: str):
        super().__init__(message, status_code=400, code=code)


class NotFoundError(CatalogError):
    def __init__(self, message: str, code: str = "CHARACTER_NOT_FOUND"):
        super().__init__(message, status_code=404, code=code)


class DependencyError(CatalogError):
    """The upstream API was unreachable, malformed, or returned a non-2xx status."""

    def __init__(self, message: str, code: str = "SWAPI_ERROR"):
        super().__init__(message, status_code=500, code=code)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: [%s] %s", request.method, request.url.path, exc.code, exc)
        return JSONResponse(failure(exc.code, str(exc)), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            failure("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
            status_code=500,
        )
