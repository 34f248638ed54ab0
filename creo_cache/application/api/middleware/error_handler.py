"""
Error Handling and Request Correlation Middleware

ErrorHandlingMiddleware is the last line of defense: any exception that
escapes route handlers and the registered exception handlers is logged and
turned into a generic 500 JSON body, so a request error never takes the
process down.

RequestIdMiddleware propagates X-Request-ID (or a fresh UUID) into the
logging context and echoes it on the response.
"""

import traceback
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from creo_cache.core.logging.logger import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)

HEADER_REQUEST_ID = "X-Request-ID"


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch-all for unhandled exceptions."""

    def __init__(self, app, include_traceback: bool = False):
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            error_response = {
                "error": "internal_server_error",
                "message": "An unexpected error occurred while processing your request",
                "errorType": error_type,
            }
            if self.include_traceback:
                error_response["traceback"] = traceback.format_exc()
                error_response["detail"] = str(e)

            return JSONResponse(status_code=500, content=error_response)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to the logging context for the duration of a request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)
        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()
