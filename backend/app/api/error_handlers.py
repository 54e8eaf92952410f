"""Error Handlers — global exception handlers for the Packstation API.

Invariants:
    - PackstationError → its http_status with code, message, category, severity
    - RequestValidationError → 400 with field-level error details
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (PackstationError), validation (Pydantic), catch-all (Exception)
    - 4xx domain errors logged at WARNING, 5xx at ERROR
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.core.errors import PackstationError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_packstation_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_packstation_error_handler(app: FastAPI) -> None:
    """Register Packstation domain/infrastructure error handler."""

    @app.exception_handler(PackstationError)
    async def packstation_error_handler(request: Request, exc: PackstationError):
        level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
        logger.log(
            level,
            f"PackstationError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "packstation_id": exc.context.packstation_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=build_validation_error_response(exc.errors()),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


_REQUEST_PARTS = ("body", "query", "path", "header")


def _field_path(loc) -> str:
    parts = list(loc)
    if len(parts) > 1 and parts[0] in _REQUEST_PARTS:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def format_validation_details(errors) -> list[dict]:
    """Flatten pydantic errors; "body.adresse.stadt" is reported as "adresse.stadt"."""
    return [
        {
            "field": _field_path(e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]


def build_validation_error_response(errors) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Fehlerhafte Packstationdaten",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": format_validation_details(errors),
        },
    }
