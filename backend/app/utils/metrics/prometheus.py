"""
Prometheus metrics for the HTTP surface and the external systems the
provisioning workflows call (Cloudflare, the composition API and Redis).
"""
import time
from typing import Callable
from functools import wraps

from prometheus_client import Counter, Histogram
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest, REGISTRY
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

METRICS_PATH = "/metrics"

REQUEST_COUNT = Counter(
    'domains_http_requests_total',
    'HTTP requests handled, by route template',
    ['method', 'route', 'status_code']
)

REQUEST_LATENCY = Histogram(
    'domains_http_request_duration_seconds',
    'HTTP request latency, by route template',
    ['method', 'route']
)

DEPENDENCY_LATENCY = Histogram(
    'domains_dependency_request_duration_seconds',
    'Latency of calls to Cloudflare, the composition API and Redis',
    ['dependency_name', 'operation']
)

DEPENDENCY_ERRORS = Counter(
    'domains_dependency_errors_total',
    'Failed calls to Cloudflare, the composition API and Redis',
    ['dependency_name', 'operation', 'error_type']
)


def _route_template(request: Request) -> str:
    # Unmatched paths share one label so scans cannot grow the series count
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware counting requests and their latency per route template.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route = _route_template(request)
            REQUEST_COUNT.labels(method=request.method, route=route, status_code=status_code).inc()
            REQUEST_LATENCY.labels(method=request.method, route=route).observe(time.perf_counter() - start_time)


def track_dependency_call(dependency_name: str, operation: str):
    """
    Decorator for tracking calls to an external system.

    Args:
        dependency_name: Name of the external system ("cloudflare", "redis", ...)
        operation: Operation being performed
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.perf_counter()

            try:
                return await func(*args, **kwargs)
            except Exception as e:
                DEPENDENCY_ERRORS.labels(
                    dependency_name=dependency_name,
                    operation=operation,
                    error_type=type(e).__name__,
                ).inc()
                raise
            finally:
                DEPENDENCY_LATENCY.labels(
                    dependency_name=dependency_name,
                    operation=operation
                ).observe(time.perf_counter() - start_time)

        return wrapper

    return decorator


def setup_metrics(app: FastAPI):
    """
    Set up Prometheus metrics for a FastAPI application.

    Args:
        app: FastAPI application
    """
    app.add_middleware(PrometheusMiddleware)

    @app.get(METRICS_PATH, include_in_schema=False)
    async def metrics():
        return Response(
            content=generate_latest(REGISTRY),
            media_type=CONTENT_TYPE_LATEST
        )
