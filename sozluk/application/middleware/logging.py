"""HTTP 请求日志中间件（支持链路追踪）。"""

from __future__ import annotations

from collections.abc import Iterable
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from sozluk.common.logging import logger, set_trace_id

TRACE_HEADERS = ("x-trace-id", "x-request-id")


def _status_level(status_code: int) -> str:
    if status_code >= 500:
        return "ERROR"
    if status_code >= 400:
        return "WARNING"
    return "INFO"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """请求日志中间件。

    - 从 X-Trace-ID / X-Request-ID 读取链路追踪 ID（没有则生成），并回写到响应头
    - 按响应状态选择日志级别，超过 slow_threshold 的请求额外记录警告
    - quiet_paths（如健康检查）只记 DEBUG，避免探针刷屏
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_threshold: float = 1.0,
        quiet_paths: Iterable[str] = ("/health",),
    ) -> None:
        super().__init__(app)
        self.slow_threshold = slow_threshold
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = next(
            (request.headers[h] for h in TRACE_HEADERS if request.headers.get(h)),
            None,
        ) or str(uuid.uuid4())
        set_trace_id(trace_id)

        path = request.url.path
        quiet = path in self.quiet_paths
        client_host = request.client.host if request.client else "unknown"
        logger.log(
            "DEBUG" if quiet else "INFO",
            f"→ {request.method} {path} | 客户端: {client_host}",
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"✗ {request.method} {path} | "
                f"异常: {type(exc).__name__}: {exc} | "
                f"耗时: {time.perf_counter() - start:.3f}s"
            )
            raise
        duration = time.perf_counter() - start

        response.headers["x-trace-id"] = trace_id
        level = _status_level(response.status_code)
        if quiet and level == "INFO":
            level = "DEBUG"
        logger.log(
            level,
            f"← {request.method} {path} | 状态: {response.status_code} | 耗时: {duration:.3f}s",
        )
        if duration > self.slow_threshold:
            logger.warning(
                f"慢请求: {request.method} {path} | "
                f"耗时: {duration:.3f}s (阈值: {self.slow_threshold}s)"
            )

        return response


__all__ = [
    "RequestLoggingMiddleware",
]
