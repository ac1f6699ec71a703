"""Error handlers that render every failure as ``{"error": ...}`` JSON."""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gradtrack.config import Settings
from gradtrack.errors import GradTrackError

logger = logging.getLogger(__name__)


def error_body(error: str, *, details: Any = None, stack: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    if stack is not None:
        body["stack"] = stack
    return body


def summarize_validation_errors(errors: list[dict[str, Any]]) -> tuple[str, list[dict[str, Any]]]:
    details = [
        {"loc": [str(part) for part in item.get("loc", ())], "msg": item.get("msg", ""), "type": item.get("type", "")}
        for item in errors
    ]
    if any(item["type"] == "missing" for item in details):
        return "Missing required fields", details
    return "Invalid request data", details


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = "Not found"
        return JSONResponse(error_body(message), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message, details = summarize_validation_errors(list(exc.errors()))
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(error_body(message, details=details), status_code=400)

    @app.exception_handler(GradTrackError)
    async def handle_app_error(request: Request, exc: GradTrackError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s on %s %s: %s details=%s",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.message,
                exc.details,
            )
            if settings.is_production:
                return JSONResponse(error_body(type(exc).default_message), status_code=exc.status_code)
        return JSONResponse(error_body(exc.message, details=exc.details), status_code=exc.status_code)


def unexpected_error_response(request: Request, exc: Exception, settings: Settings) -> JSONResponse:
    """Render an exception no handler claimed; runs inside the CORS and header middleware."""
    logger.error("Server error on %s %s", request.method, request.url.path, exc_info=exc)
    if settings.is_production:
        return JSONResponse(error_body("Internal server error"), status_code=500)
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(error_body(str(exc) or type(exc).__name__, stack=stack), status_code=500)
