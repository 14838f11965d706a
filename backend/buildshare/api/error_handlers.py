"""Error Handlers — global exception handlers for the build-share API.

Invariants:
    - Every failure body is {status: "Failed", message, error: {...}}, the same
      envelope the build routes return for failed store results
    - BuildShareError → its http_status; 4xx logged at INFO, 5xx at ERROR
    - RequestValidationError → 400 with field-level error details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Store operations already return OperationResult; these handlers only see
      errors raised outside the store (dependencies, request parsing, bugs)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from buildshare.core.errors import BuildShareError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def failure_envelope(error: BuildShareError) -> dict:
    """Body for a failed build operation, shared by routes and handlers."""
    return {"status": "Failed", "message": error.message, **error.to_response()}


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(BuildShareError)
    async def build_share_error_handler(request: Request, exc: BuildShareError):
        # Client errors (not found, validation) are routine; only 5xx is an error
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"BuildShareError: {exc.message}",
            extra={
                "error_code": exc.code, "path": request.url.path,
                "shortcode": exc.context.shortcode,
                "operation": exc.context.operation,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=failure_envelope(exc),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path, "error_code": "VALIDATION_ERROR"},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "Failed",
                "message": "An unexpected error occurred",
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": ErrorCategory.INTERNAL.value,
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "status": "Failed",
        "message": "Invalid request data",
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.WARNING.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
