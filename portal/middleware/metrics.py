# portal/middleware/metrics.py
import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portal.core.config import settings

logger = logging.getLogger(__name__)

CHECKOUT_PATHS = (
    "/orders/checkout",
    "/orders/copay/verify",
    "/bulk-buy/checkout",
    "/bulk-buy/requests/direct",
)


def new_metrics() -> dict:
    return {
        "requests": 0,
        "total_response_ms": 0.0,
        "slow_requests": 0,
        "checkouts_committed": 0,
        "checkout_conflicts": 0,
    }


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Collects in-process metrics:
      - total requests and total response time (ms)
      - slow requests (over SLOW_REQUEST_MS, also logged)
      - checkout outcomes: committed (2xx) and conflicts (409)
    NOTE: do NOT touch app.state in __init__, it may not be available yet while the middleware stack builds.
    """

    def __init__(self, app, dispatch: Callable = None):
        super().__init__(app, dispatch=dispatch)

    async def dispatch(self, request: Request, call_next):
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is None:
            metrics = request.app.state.metrics = new_metrics()

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        metrics["requests"] += 1
        metrics["total_response_ms"] += elapsed_ms

        if elapsed_ms > settings.SLOW_REQUEST_MS:
            metrics["slow_requests"] += 1
            logger.warning(
                "Slow request %s %s took %.2f ms (status %s)",
                request.method,
                request.url.path,
                elapsed_ms,
                response.status_code,
            )

        if request.method == "POST" and request.url.path in CHECKOUT_PATHS:
            if 200 <= response.status_code < 300:
                metrics["checkouts_committed"] += 1
            elif response.status_code == 409:
                metrics["checkout_conflicts"] += 1

        return response
