"""Request ID middleware for request tracing and logging.

This middleware:
1. Generates a unique UUID for each incoming request
2. Stores it in a context variable (propagates through async calls)
3. Adds it to request state for route handlers
4. Returns it in response headers for client-side tracking
"""

import uuid
from contextvars import ContextVar
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_ID_HEADER = "X-Request-ID"

# Context variable to store request ID across async operations
request_id_ctx_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context variable.

    Returns:
        Request UUID string, or None if not set
    """
    return request_id_ctx_var.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and attach unique request ID to each request.

    Flow:
    1. Request arrives → Generate UUID
    2. Store in context variable (read by the logging filter)
    3. Store in request.state (available in route handlers)
    4. Process request
    5. Add UUID to response header X-Request-ID
    """

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())

        token = request_id_ctx_var.set(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
