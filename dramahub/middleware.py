import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from .logging_utils import log_api_request
from .metrics import record_http_request


def _route_template(request: Request) -> str:
    """Path template of the matched route, so metrics labels stay bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def log_requests_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Middleware to log all HTTP requests with timing information.

    Args:
        request: FastAPI request object
        call_next: Next middleware/route handler in the chain

    Returns:
        Response from the route handler
    """
    start_time = time.perf_counter()

    response = await call_next(request)

    elapsed = time.perf_counter() - start_time

    log_api_request(
        request=request,
        response_status=response.status_code,
        process_time_ms=elapsed * 1000,
    )
    record_http_request(
        method=request.method,
        endpoint=_route_template(request),
        status_code=response.status_code,
        duration=elapsed,
    )

    return response
