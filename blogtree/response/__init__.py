"""响应模块

使用示例:
    from blogtree.response import Resp

    return Resp.OK(data=result)
    return Resp.OK(data=result, message="移动成功")
"""

from .base_response import (
    Resp,
    ResponseStatus,
    ItemResponse,
    ListResponse,
    OkResponse,
    ValidationErrorResponse,
    serialize_data,
    make_response,
)

__all__ = [
    "Resp",
    "ResponseStatus",
    "ItemResponse",
    "ListResponse",
    "OkResponse",
    "ValidationErrorResponse",
    "serialize_data",
    "make_response",
]
