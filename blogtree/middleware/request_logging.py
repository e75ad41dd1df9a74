"""请求日志记录中间件"""

import logging
import time
from typing import Iterable

from blogtree.log import api_logger


class RequestLoggingMiddleware:
    """纯 ASGI 请求日志记录中间件

    每个请求结束后记录一行：方法、路径、状态码、耗时。
    状态码 >= 500 记为 ERROR，>= 400 记为 WARNING。

    使用示例:
        app.add_middleware(RequestLoggingMiddleware, skip_paths=["/docs"])
    """

    def __init__(self, app, skip_paths: Iterable[str] = None, logger: logging.Logger = None):
        self.app = app
        self.skip_paths = set(skip_paths or ())
        self.logger = logger or api_logger

    def _should_skip(self, path: str) -> bool:
        return any(path.startswith(skip) for skip in self.skip_paths)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or self._should_skip(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            query = scope.get("query_string", b"").decode("latin-1")
            path = scope.get("path", "") + (f"?{query}" if query else "")
            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            self.logger.log(level, f"{scope.get('method')} {path} -> {status_code} ({elapsed:.2f}ms)")
