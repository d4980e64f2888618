"""Trace ID middleware for request/response propagation."""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from usersync.logging_config import bind_request_context, clear_request_context

# Same bounds as ErrorDetail.trace_id
TRACE_ID_MIN_LENGTH = 8
TRACE_ID_MAX_LENGTH = 128


def _accept_trace_id(value: str | None) -> str | None:
    if value and TRACE_ID_MIN_LENGTH <= len(value) <= TRACE_ID_MAX_LENGTH:
        return value
    return None


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Extract X-Trace-Id from request or generate one; bind it for logging."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = _accept_trace_id(request.headers.get("x-trace-id")) or f"trc_{uuid.uuid4().hex[:16]}"
        request.state.trace_id = trace_id

        clear_request_context()
        bind_request_context(
            trace_id,
            delivery_id=request.headers.get("svix-id") or request.headers.get("webhook-id"),
        )
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Trace-Id"] = trace_id
        return response
