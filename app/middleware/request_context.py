"""Request context middleware: request IDs and structlog context."""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.errors import global_exception_handler
from app.core.logging import clear_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID to every request and echoes it in the response.

    An incoming X-Request-ID header is reused so IDs can be traced across
    the content pages and this service. Exceptions that escape the routers
    are rendered here, while the request ID is still bound, so 500 bodies
    carry it too.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER) or None)
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await global_exception_handler(request, exc)
        finally:
            structlog.contextvars.clear_contextvars()
            clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
