"""
Prometheus metrics configuration.
"""

import time
from typing import Any, Callable, cast

from fastapi import FastAPI, Request, Response
from loguru import logger
from prometheus_client import REGISTRY, Counter, Gauge, Histogram
from prometheus_client.exposition import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests count", ["method", "endpoint", "status_code"])

REQUEST_TIME = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, float("inf")),
)

REQUEST_IN_PROGRESS = Gauge("http_requests_in_progress", "Number of HTTP requests in progress", ["method", "endpoint"])

EXCEPTION_COUNT = Counter(
    "http_exceptions_total", "Total HTTP exceptions count", ["method", "endpoint", "exception_type"]
)

# Auction metrics
BIDS_TOTAL = Counter("auction_bids_total", "Bid placement attempts by outcome", ["outcome"])

ITEMS_CLOSED = Counter("auction_items_closed_total", "Items transitioned from open to closed")

ITEM_LOCK_WAIT = Histogram(
    "auction_item_lock_wait_seconds",
    "Time spent waiting for the per-item critical section",
    ["operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, float("inf")),
)


def normalize_path(path: str) -> str:
    """Collapse numeric path segments so metric labels stay low-cardinality."""
    return "/".join("{id}" if part.isdigit() else part for part in path.split("/"))


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware that collects Prometheus metrics for HTTP requests.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        method = request.method
        path = request.url.path

        if path == "/metrics":
            return cast(Response, await call_next(request))

        path = normalize_path(path)
        start_time = time.perf_counter()
        REQUEST_IN_PROGRESS.labels(method=method, endpoint=path).inc()

        try:
            response = cast(Response, await call_next(request))
            REQUEST_COUNT.labels(method=method, endpoint=path, status_code=response.status_code).inc()
            REQUEST_TIME.labels(method=method, endpoint=path).observe(time.perf_counter() - start_time)
            return response
        except Exception as e:
            EXCEPTION_COUNT.labels(method=method, endpoint=path, exception_type=type(e).__name__).inc()
            logger.exception(f"Request failed: {str(e)}")
            raise
        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=path).dec()


async def metrics_endpoint(request: Request) -> Response:
    """
    Endpoint for exposing Prometheus metrics.
    """
    return Response(content=generate_latest(REGISTRY), headers={"Content-Type": CONTENT_TYPE_LATEST})


def setup_metrics(app: FastAPI) -> None:
    """
    Set up Prometheus metrics and middleware for FastAPI application.
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint)

    logger.info("Prometheus metrics configured")


def record_bid(outcome: str) -> None:
    """Count a bid attempt; outcome is ``accepted`` or the rejection code."""
    BIDS_TOTAL.labels(outcome=outcome).inc()


def record_item_closed() -> None:
    ITEMS_CLOSED.inc()


def observe_lock_wait(operation: str, seconds: float) -> None:
    ITEM_LOCK_WAIT.labels(operation=operation).observe(seconds)
