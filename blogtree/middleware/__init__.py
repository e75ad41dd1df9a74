"""中间件模块

- RequestIDMiddleware: 请求ID生成与 session 清理
- RequestLoggingMiddleware: 请求日志记录
"""

from .request_id import RequestIDMiddleware, get_request_id
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "get_request_id",
]
