"""
Error handling middleware.
Centralizes error handling and response formatting. Every error leaves the
relay as ``{"error": "<message>"}``.
"""
import json
import logging
import traceback
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from chat_relay.controllers.errors import RelayError
from chat_relay.controllers.relay_controller import INTERNAL_ERROR, MISSING_MESSAGES_ERROR

logger = logging.getLogger(__name__)

INVALID_JSON_ERROR = "Request body must be valid JSON"


def validation_error_message(errors: list) -> str:
    """Condense pydantic validation errors into a single client-facing message."""
    for error in errors:
        if error.get("type") == "json_invalid":
            return INVALID_JSON_ERROR

    for error in errors:
        loc = error.get("loc", ())
        # loc is ("body",) when the body itself is missing or not an object
        if len(loc) < 2 or loc[1] == "messages":
            return MISSING_MESSAGES_ERROR

    loc = errors[0].get("loc", ()) if errors else ()
    field = loc[1] if len(loc) > 1 else "body"
    message = errors[0].get("msg", "invalid value") if errors else "invalid value"
    return f"Invalid '{field}' in payload: {message}"


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": [{"loc": e.get("loc"), "type": e.get("type")} for e in errors],
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": validation_error_message(errors)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render relay and validation errors in the ``{"error": ...}`` shape."""
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Last-resort handler for exceptions nothing else caught."""

    async def _get_request_body(self, request: Request) -> Optional[object]:
        """
        Safely extract request body for error logging.
        """
        try:
            if hasattr(request.state, "body"):
                body_bytes = request.state.body
            else:
                body_bytes = await request.body()
                request.state.body = body_bytes

            if not body_bytes:
                return None

            return json.loads(body_bytes.decode("utf-8"))
        except (RuntimeError, UnicodeDecodeError, ValueError):
            return None

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            body = await self._get_request_body(request)

            tb_str = traceback.format_exc()

            # Exception details only in debug mode, never in production
            from chat_relay.config.settings import get_settings

            try:
                settings = get_settings()
                show_details = settings.debug and not settings.is_production
            except Exception:
                show_details = False

            logger.error(
                "Unhandled error",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "request_body": body,
                    "traceback": tb_str,
                },
                exc_info=True,
            )

            if show_details:
                message = f"{INTERNAL_ERROR}: {type(e).__name__}: {e}"
            else:
                message = INTERNAL_ERROR

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": message},
            )
