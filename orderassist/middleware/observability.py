from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from orderassist.core.metrics import request_metrics
from orderassist.core.request_context import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _route_label(request: Request) -> str:
    # Prefer the matched route template so metrics stay keyed per route.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id, times it and records route metrics."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_context(request_id=request_id)
        started = time.perf_counter()

        response: Response | None = None
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            status_code = response.status_code if response is not None else 500
            endpoint = _route_label(request)
            request_metrics.observe(endpoint, request.method, status_code, elapsed_ms)
            log = logger.warning if status_code >= 500 else logger.info
            log(
                "%s %s -> %s",
                request.method,
                endpoint,
                status_code,
                extra={
                    "endpoint": endpoint,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": elapsed_ms,
                },
            )
            clear_request_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
