"""
Global exception handlers — the only place auth errors become HTTP.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth.errors import AuthError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Attach domain, validation and catch-all handlers."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        logger.info(
            "%s on %s %s", type(exc).__name__, request.method, request.url.path,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "statusCode": status.HTTP_400_BAD_REQUEST,
                "error": "Bad Request",
                "message": validation_message(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Store or hashing failure — never leaks internal details."""
        logger.error(
            "Unhandled exception on %s: %s", request.url.path, exc, exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "statusCode": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "error": "Internal Server Error",
                "message": "An unexpected error occurred",
            },
        )


def validation_message(errors: List[Dict[str, Any]]) -> str:
    """
    Describe the first validation error in a single sentence.

    Missing fields read ``body should have required property '<name>'``.
    """
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ())]
    where, field = (loc[0], loc[-1]) if len(loc) > 1 else ("body", None)

    if first.get("type") == "missing":
        if field is None:
            return f"{where} should be object"
        return f"{where} should have required property '{field}'"
    if first.get("type") in ("model_attributes_type", "dict_type"):
        return f"{where} should be object"
    path = "/".join(loc)
    return f"{path} {first.get('msg', 'is invalid')}"
