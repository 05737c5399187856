"""
Centralized error handlers.

Every failure leaves the service in one envelope:
``{"error": str, "error_code": str, "errors": [{param, msg}]?}``.
Handlers switch on ``ErrorKind`` and never expose internals to clients.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import (
    ApiError,
    ErrorKind,
    MethodNotAllowedError,
    NotFoundError,
)
from ..i18n import MessageCatalog

logger = logging.getLogger(__name__)

HTTP_503 = 503
HTTP_500 = 500


def _error_response(
    status_code: int,
    error: str,
    error_code: str,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error envelope."""
    body: dict[str, Any] = {"error": error, "error_code": error_code}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _locale(request: Request) -> str:
    messages: MessageCatalog = request.app.state.messages
    return getattr(request.state, "locale", None) or messages.default_locale


def _translate(request: Request, key: str) -> str:
    messages: MessageCatalog = request.app.state.messages
    return messages.translate(key, _locale(request))


def normalize(request: Request, exc: ApiError, headers: dict[str, str] | None = None) -> JSONResponse:
    """Classify a tagged error once and render its envelope."""
    if exc.kind is ErrorKind.CONNECTIVITY:
        logger.warning("store unavailable while serving %s %s", request.method, request.url.path)
        return _error_response(
            HTTP_503,
            _translate(request, "DEFAULT_ERRORS.TEMPORARILY_UNAVAILABLE"),
            "temporarily_unavailable",
        )
    message = exc.message or _translate(request, f"DEFAULT_ERRORS.{exc.locale_tag}")
    return _error_response(
        exc.status_code, message, exc.error_code, exc.errors_payload(), headers=headers
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        """Handle errors raised deliberately by the workflow or data accessors."""
        return normalize(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Map framework routing errors (unmatched path or method) onto the envelope."""
        if exc.status_code == 404:
            return normalize(request, NotFoundError())
        if exc.status_code == 405:
            return normalize(request, MethodNotAllowedError(), headers=exc.headers)
        return _error_response(
            exc.status_code, str(exc.detail), "http_error", headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors; the error is re-raised to the server after responding."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        # rendered outside the locale middleware, so the header is set here
        return _error_response(
            HTTP_500,
            _translate(request, "DEFAULT_ERRORS.SERVER_ERROR"),
            "server_error",
            headers={"Content-Language": _locale(request)},
        )
