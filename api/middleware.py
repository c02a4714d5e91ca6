"""Request id middleware using ContextVar.

Takes the request id from the X-Request-ID header (or generates one) and
binds it to the logging context for the lifetime of the request, so every
log line written while handling it, from routers down to repositories,
carries the same id. The id is echoed back in the response header.
"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.observability.logging_setup import bind_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the current context.

    Priority:
    1. X-Request-ID header (explicit, e.g. from a gateway)
    2. Freshly generated uuid4 hex
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            reset_request_id(token)
