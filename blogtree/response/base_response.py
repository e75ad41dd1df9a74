"""统一响应格式

成功与失败都返回 {"status", "message", "msg_details", "data"}；
错误响应由异常处理器额外加上 error_code。
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

T = TypeVar('T')

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'


class ResponseStatus(str, Enum):
    """业务状态，与 HTTP 状态码相互独立"""
    SUCCESS = "success"
    ERROR = "error"


# ========== OpenAPI 文档用的响应模型 ==========

class _Envelope(BaseModel):
    status: str = Field(default="success", description="响应状态")
    message: str = Field(default="请求成功", description="响应消息")
    msg_details: List[str] = Field(default_factory=list, description="详细信息")


class ItemResponse(_Envelope, Generic[T]):
    """单项响应，如 ItemResponse[CategoryDTO]"""
    data: T = Field(description="数据")


class ListResponse(_Envelope, Generic[T]):
    """列表响应，分类与菜单数量有限，不分页"""
    data: List[T] = Field(default_factory=list, description="数据列表")


class OkResponse(_Envelope):
    """结构不固定的结果：树、删除结果、移动结果等"""
    data: Any = Field(default_factory=dict, description="操作结果")


class ValidationErrorResponse(_Envelope):
    """422 响应，替换 FastAPI 默认的验证错误 Schema"""
    status: str = Field(default="error", description="响应状态")
    message: str = Field(default="请求参数验证失败", description="错误消息")
    data: dict = Field(default_factory=dict, description="空数据")
    error_code: str = Field(default="VALIDATION_ERROR", description="错误码")


# ========== 序列化 ==========

def serialize_data(data: Any, top_level: bool = True) -> Any:
    """把响应数据转换为可 JSON 序列化的值

    支持 DTO / MoveResult 等带 to_dict() 的对象、ORM 实体、时间与枚举；
    顶层 None 返回 {}，嵌套的 None 保持不变。
    """
    if data is None:
        return {} if top_level else None
    if isinstance(data, datetime):
        return data.strftime(DATETIME_FORMAT)
    if isinstance(data, Enum):
        return data.value
    if hasattr(data, '__table__'):
        return {column.name: serialize_data(getattr(data, column.name, None), False)
                for column in data.__table__.columns}
    if callable(getattr(data, 'to_dict', None)):
        return serialize_data(data.to_dict(), False)
    if isinstance(data, (list, tuple)):
        return [serialize_data(item, False) for item in data]
    if isinstance(data, dict):
        return {key: serialize_data(value, False) for key, value in data.items()}
    return data


def make_response(
    message: str,
    data: Any = None,
    msg_details: Optional[List[str]] = None,
    status_code: int = status.HTTP_200_OK,
    response_status: ResponseStatus = ResponseStatus.SUCCESS,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": response_status.value,
            "message": message,
            "msg_details": list(msg_details or []),
            "data": serialize_data(data),
        },
    )


class Resp:
    """响应快捷方式

    错误响应不在这里构造：抛出 BusinessException，由异常处理器生成。

    使用示例:
        return Resp.OK(data=CategoryDTO.from_list(categories))
        return Resp.OK(data=result, message="分类排序更新成功")
    """

    @staticmethod
    def OK(data: Any = None, message: str = "请求成功") -> JSONResponse:
        return make_response(message, data)
