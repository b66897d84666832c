"""Request logging middleware"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("taxclusive.requests")


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RequestLogMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, log_all: bool = True):
        super().__init__(app)
        self.log_all = log_all

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 400:
            level = logging.WARNING
        elif self.log_all:
            level = logging.INFO
        else:
            return response

        logger.log(
            level,
            "%s %s %d %.1fms ip=%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            get_client_ip(request),
        )
        return response
