"""
Global error handling for the FastAPI application.

Catches CaseRegisterError subclasses, Pydantic validation errors, and
unhandled exceptions, converting them into a consistent JSON envelope.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from caseregister.core.exceptions import CaseRegisterError
from caseregister.core.models import ErrorResponse

logger = logging.getLogger(__name__)


def _envelope(status_code: int, detail: str, code: str, timestamp: str) -> JSONResponse:
    body = ErrorResponse(error=detail, detail=detail, code=code, timestamp=timestamp)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers three handlers in priority order:
    1. ``CaseRegisterError``: maps domain errors to structured JSON responses.
    2. ``RequestValidationError``: Pydantic validation failures (422).
    3. ``Exception``: catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(CaseRegisterError)
    async def case_register_error_handler(
        request: Request, exc: CaseRegisterError
    ) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("%s %s failed: [%s] %s", request.method, request.url.path, exc.code, exc.detail)
        return _envelope(exc.status_code, exc.detail, exc.code, exc.timestamp)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic request validation errors (malformed body/params)."""
        return _envelope(422, str(exc), "VALIDATION_ERROR", datetime.now(UTC).isoformat())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler. Prevents stack traces from leaking to clients."""
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _envelope(
            500, "Internal server error", "INTERNAL_ERROR", datetime.now(UTC).isoformat()
        )
