"""Prometheus HTTP metrics middleware."""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics


def normalize_path(raw_path: str) -> str:
    """Collapse numeric path segments: /api/courses/12/submit -> /api/courses/:id/submit."""
    return "/".join(":id" if segment.isdigit() else segment for segment in raw_path.split("/"))


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip the metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            prometheus_metrics.record_http_request(
                method=method, endpoint=path, duration=time.time() - start_time, status_code=500
            )
            raise

        prometheus_metrics.record_http_request(
            method=method,
            endpoint=path,
            duration=time.time() - start_time,
            status_code=response.status_code,
        )
        return response
