"""Prometheus metrics for the gateway."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("llm_gateway", "LLM Gateway application info")
APP_INFO.info({"version": "0.1.0", "name": "llm_gateway"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

COMPLETIONS = Counter(
    "llm_gateway_completions_total",
    "Completions dispatched to a provider, by outcome (ok or error code)",
    ["provider", "outcome"],
)

COMPLETION_DURATION = Histogram(
    "llm_gateway_completion_duration_seconds",
    "Upstream completion latency in seconds",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)


UNMATCHED_PATH = "unmatched"


# --- Middleware ---


def _route_path(request: Request) -> str:
    """Route template (e.g. /api/v1/models) to keep label cardinality bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        # Resolved after routing; the router stores the matched route in scope
        path = _route_path(request)

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
