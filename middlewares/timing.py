import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from config.settings import settings

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds X-Latency-Ms and logs requests slower than SLOW_REQUEST_MS"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)

        if latency_ms >= settings.SLOW_REQUEST_MS:
            logger.warning(f"Slow request: {request.method} {request.url.path} {response.status_code} {latency_ms}ms")
        else:
            logger.debug(f"{request.method} {request.url.path} {response.status_code} {latency_ms}ms")
        return response
