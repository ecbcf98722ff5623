"""LoggingMiddleware -- 请求级日志

每个请求分配一个 ULID request_id，与 method/path 一起绑定到 structlog contextvars，
后续鉴权绑定的 user_id 也会出现在同一请求的所有日志中。
request_id 通过 X-Request-ID 响应头返回给调用方。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        started = time.monotonic()

        # 每个请求从干净的上下文开始，避免残留上一个请求的 user_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.adebug("request_started")

        response = await call_next(request)

        fields = {
            "status_code": response.status_code,
            "duration_ms": int((time.monotonic() - started) * 1000),
        }
        if response.status_code >= 400:
            await log.awarning("request_completed", **fields)
        else:
            await log.ainfo("request_completed", **fields)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
