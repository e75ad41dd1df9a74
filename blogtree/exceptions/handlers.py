"""全局异常处理器

所有错误都转换为 {"status", "message", "msg_details", "data", "error_code"}：
    - BusinessException：使用异常自带的状态码与错误码
    - RequestValidationError：422，字段错误翻译为中文
    - HTTPException：原状态码，错误码 HTTP_<状态码>
    - 其他异常：500，记录完整堆栈，调试模式下返回异常摘要
"""

import traceback
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogtree.log import get_logger
from blogtree.response import ResponseStatus, ValidationErrorResponse
from .exceptions import BusinessException, ErrorCode

logger = get_logger("blogtree.exceptions")

# pydantic v2 错误类型 -> 中文提示
VALIDATION_MESSAGES: Dict[str, str] = {
    "missing": "此字段为必填项",
    "int_type": "必须是整数",
    "int_parsing": "必须是整数",
    "bool_type": "必须是布尔值",
    "bool_parsing": "必须是布尔值",
    "string_type": "必须是字符串",
    "list_type": "必须是列表",
    "dict_type": "必须是对象",
    "model_type": "必须是有效的对象",
    "json_invalid": "JSON 格式不正确",
    "value_error": "值无效",
    "extra_forbidden": "不允许额外的字段",
}

# 需要 ctx 中参数的提示
VALIDATION_TEMPLATES: Dict[str, str] = {
    "string_too_short": "长度不能少于 {min_length} 个字符",
    "string_too_long": "长度不能超过 {max_length} 个字符",
    "greater_than": "必须大于 {gt}",
    "greater_than_equal": "必须大于或等于 {ge}",
    "less_than": "必须小于 {lt}",
    "less_than_equal": "必须小于或等于 {le}",
    "enum": "值必须是以下之一: {expected}",
    "literal_error": "值必须是以下之一: {expected}",
}

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def translate_validation_error(error: Dict[str, Any]) -> Optional[str]:
    """翻译单个 pydantic 错误，未知类型返回 None"""
    error_type = error.get("type", "")
    template = VALIDATION_TEMPLATES.get(error_type)
    if template is not None:
        try:
            return template.format(**(error.get("ctx") or {}))
        except (KeyError, IndexError):
            return template
    return VALIDATION_MESSAGES.get(error_type)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in _LOCATION_PREFIXES]
    return ".".join(parts) or "请求体"


def _error_response(status_code: int, message: str, error_code: str,
                    details: Optional[List[str]] = None, debug_info: Any = None) -> JSONResponse:
    content = {
        "status": ResponseStatus.ERROR.value,
        "message": message,
        "msg_details": details or [],
        "data": {},
        "error_code": error_code,
    }
    if debug_info:
        content["debug_info"] = debug_info
    return JSONResponse(status_code=status_code, content=content)


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "path": request.url.path,
        "method": request.method,
    }


def _debug_enabled(request: Request) -> bool:
    return bool(getattr(request.app.state, "debug", False))


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """业务异常：5xx 记为 error，其余记为 warning（被拒绝的树移动在这里记录）"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"业务异常 {exc.code}: {exc.message} {exc.extra or ''}".rstrip(), extra=_request_context(request))

    code = exc.code.value if isinstance(exc.code, ErrorCode) else str(exc.code)
    debug_info = None
    if _debug_enabled(request) and exc.extra:
        debug_info = {key: str(value) for key, value in exc.extra.items()}
    return _error_response(exc.status_code, exc.message, code, exc.details, debug_info)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        f"{_field_name(error['loc'])}: {translate_validation_error(error) or error['msg']}"
        for error in exc.errors()
    ]
    logger.warning(f"请求参数验证失败: {details}", extra=_request_context(request))
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "请求参数验证失败",
        ErrorCode.VALIDATION_ERROR.value,
        details,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"HTTP {exc.status_code}: {exc.detail}", extra=_request_context(request))
    return _error_response(exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底处理，不向调用方暴露异常消息（调试模式除外）"""
    tb_lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error(
        f"未处理的异常 {type(exc).__name__}: {exc}\n{''.join(tb_lines)}",
        extra=_request_context(request),
    )

    details, debug_info = [], None
    if _debug_enabled(request):
        details = [f"异常类型: {type(exc).__name__}", f"异常消息: {exc}"]
        debug_info = {"traceback": tb_lines[-5:]}
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "服务器内部错误",
        ErrorCode.INTERNAL_SERVER_ERROR.value,
        details,
        debug_info,
    )


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """注册异常处理器

    使用示例:
        app = FastAPI()
        register_exception_handlers(app, debug=settings.debug)
    """
    app.state.debug = debug
    app.add_exception_handler(BusinessException, business_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # OpenAPI 中的 422 响应使用统一格式
    app.router.responses[422] = {"description": "请求参数验证失败", "model": ValidationErrorResponse}
