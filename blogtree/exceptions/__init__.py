"""异常处理模块

提供业务异常类、树形结构异常与全局异常处理器。

使用示例:
    from blogtree.exceptions import Err, register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

    raise Err.not_found("分类不存在")
"""

from .exceptions import (
    Err,
    ErrorCode,
    ErrorCodeType,

    BusinessException,              # 400
    ResourceNotFoundException,      # 404
    ResourceConflictException,      # 409
    ValidationException,            # 422

    NodeNotFoundError,              # 404
    TreeStructureError,             # 400
    SelfParentError,                # 400
    CycleError,                     # 400
    TreeTransactionError,           # 500
)

from .handlers import (
    register_exception_handlers,
    business_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler,
    translate_validation_error,
)

__all__ = [
    "Err",
    "ErrorCode",
    "ErrorCodeType",
    "register_exception_handlers",

    "BusinessException",
    "ResourceNotFoundException",
    "ResourceConflictException",
    "ValidationException",

    "NodeNotFoundError",
    "TreeStructureError",
    "SelfParentError",
    "CycleError",
    "TreeTransactionError",

    "business_exception_handler",
    "validation_exception_handler",
    "http_exception_handler",
    "general_exception_handler",
    "translate_validation_error",
]
