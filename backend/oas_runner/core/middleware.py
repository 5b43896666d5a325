"""
Request monitoring and error logging middleware.
"""
import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from oas_runner.core.monitoring import record_http_request

logger = logging.getLogger(__name__)

# Test runs probe remote APIs and are expected to take a while
SLOW_REQUEST_SECONDS = 10.0


def _route_label(request: Request) -> str:
    """Route template when matched, so /auth-configs/{name} stays one label."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Record duration and status of every API call."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        route = _route_label(request)
        record_http_request(request.method, route, response.status_code, elapsed)
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {request.method} {route} took {elapsed:.2f}s")
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Log unhandled errors before FastAPI turns them into a 500."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                f"Unhandled error on {request.method} {request.url.path}: {str(e)}",
                exc_info=True
            )
            raise
