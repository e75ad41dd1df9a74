"""请求ID中间件

使用纯 ASGI 中间件而非 BaseHTTPMiddleware：BaseHTTPMiddleware 在 call_next
时创建新的任务上下文，ContextVar 的修改无法传播回来，session 清理会失败。
"""

from blogtree.orm.db_session import db_manager, on_request_end


class RequestIDMiddleware:
    """请求ID中间件（纯 ASGI 实现）

    为每个请求生成ID并作为 scoped_session 的作用域键，
    请求结束时提交并移除该请求的 session。
    请求ID总是由服务端生成，客户端传入的同名请求头不参与 session 划分。

    使用示例:
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)
    """

    def __init__(self, app, header_name: str = "x-request-id"):
        self.app = app
        self.header_name = header_name.lower().encode()

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = db_manager._set_request_id()
        scope.setdefault("state", {})["request_id"] = request_id
        header_name = self.header_name

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((header_name, request_id.encode()))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            # 与请求处理在同一上下文中执行，ContextVar 修改可见
            on_request_end()


def get_request_id() -> str:
    return db_manager._get_request_id()
