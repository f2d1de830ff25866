import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from offerdesk.core.logging_config import request_id_ctx_var

logger = logging.getLogger("offerdesk.request")

_MAX_REQUEST_ID_LENGTH = 64


def _incoming_request_id(request: Request) -> str | None:
    value = (request.headers.get("X-Request-ID") or "").strip()
    if not value or len(value) > _MAX_REQUEST_ID_LENGTH:
        return None
    return value


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = _incoming_request_id(request) or str(uuid.uuid4())
        token = request_id_ctx_var.set(request_id)
        start = time.perf_counter()
        request.state.request_id = request_id
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            if response is not None:
                response.headers["X-Request-ID"] = request_id
                logger.info(
                    "request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "status_code": response.status_code,
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                    },
                )
            request_id_ctx_var.reset(token)
