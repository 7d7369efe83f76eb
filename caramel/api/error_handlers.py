"""Error Handlers — global exception handlers for the CARAMEL API.

Invariants:
    - CaramelError → its own status and {"success": false, "error", "code", ...}
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500 "Internal server error"; the exception text is
      included as `details` only outside production mode
    - 500-level `details` are dropped in production mode for every handler

Design Decisions:
    - Three-layer handler: domain (CaramelError), validation (Pydantic), catch-all (Exception)
    - error_response() shared with middleware, which answers before routing and
      therefore never reaches these handlers
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from caramel.core.errors import CaramelError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_caramel_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def expose_details(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is None or not settings.is_production


def error_response(
    exc: CaramelError, expose: bool, headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(expose_details=expose),
        headers=headers,
    )


def _register_caramel_error_handler(app: FastAPI) -> None:
    """Register CARAMEL domain/infrastructure error handler."""

    @app.exception_handler(CaramelError)
    async def caramel_error_handler(request: Request, exc: CaramelError):
        """Handle all CARAMEL errors raised by routes and services."""
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"CaramelError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.http_status,
            },
        )
        return error_response(exc, expose_details(request))


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — internal detail only outside production."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
        content = {
            "success": False,
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
        }
        if expose_details(request):
            content["details"] = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "success": False,
        "error": "Invalid request data",
        "code": "VALIDATION_ERROR",
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }
