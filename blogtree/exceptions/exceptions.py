"""业务异常

服务层与 TreeMutator 抛出这些异常，由 handlers 转换为统一响应。
子类只声明默认消息、错误码与 HTTP 状态码。
"""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi import status


class ErrorCode(str, Enum):
    """错误代码，响应中的 error_code 字段"""

    BUSINESS_ERROR = "BUSINESS_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # 404
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    NODE_NOT_FOUND = "NODE_NOT_FOUND"

    # 409
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # 422
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 树形结构，400
    SELF_PARENT = "SELF_PARENT"
    CYCLE_DETECTED = "CYCLE_DETECTED"

    # 500
    TRANSACTION_FAILED = "TRANSACTION_FAILED"


ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    Attributes:
        message: 面向用户的错误消息
        code: 错误代码
        status_code: HTTP 状态码
        details: 明细列表，对应响应的 msg_details
        extra: 其他上下文（节点ID、字段名等），写入日志

    使用示例:
        raise BusinessException("操作失败")
        raise ValidationException("缺少必要参数", details=["activeId 不能为空"])
    """

    default_message = "业务处理失败"
    default_code: ErrorCodeType = ErrorCode.BUSINESS_ERROR
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCodeType] = None,
        status_code: Optional[int] = None,
        details: Optional[List[str]] = None,
        **extra: Any,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = list(details or [])
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": list(self.details),
            "extra": copy.deepcopy(self.extra),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, status_code={self.status_code})"


class ResourceNotFoundException(BusinessException):
    default_message = "资源不存在"
    default_code = ErrorCode.RESOURCE_NOT_FOUND
    default_status = status.HTTP_404_NOT_FOUND


class ResourceConflictException(BusinessException):
    """唯一性冲突，例如分类名称或别名重复"""
    default_message = "资源冲突"
    default_code = ErrorCode.RESOURCE_CONFLICT
    default_status = status.HTTP_409_CONFLICT


class ValidationException(BusinessException):
    default_message = "数据验证失败"
    default_code = ErrorCode.VALIDATION_ERROR
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY


# ==================== 树形结构 ====================

class NodeNotFoundError(ResourceNotFoundException):
    """移动节点、参照节点或目标父节点不存在"""
    default_code = ErrorCode.NODE_NOT_FOUND

    def __init__(self, node_id: Any, model_name: str = "Node", message: str = None, **extra: Any):
        self.node_id = node_id
        super().__init__(
            message or f"{model_name} 不存在: {node_id}",
            resource_type=model_name,
            resource_id=node_id,
            **extra,
        )


class TreeStructureError(BusinessException):
    """移动请求本身不合法（400），存储未被修改"""


class SelfParentError(TreeStructureError):
    """节点成为自己的父节点，或相对自己定位"""
    default_message = "不能将节点设为自己的子节点"
    default_code = ErrorCode.SELF_PARENT

    def __init__(self, node_id: Any, message: str = None):
        self.node_id = node_id
        super().__init__(message, node_id=node_id)


class CycleError(TreeStructureError):
    """目标父节点位于被移动节点的子树中"""
    default_message = "不能将节点移动到其子节点中"
    default_code = ErrorCode.CYCLE_DETECTED

    def __init__(self, node_id: Any, parent_id: Any, message: str = None):
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(message, node_id=node_id, parent_id=parent_id)


class TreeTransactionError(BusinessException):
    """写入阶段的存储失败，事务已整体回滚"""
    default_message = "树形结构更新失败"
    default_code = ErrorCode.TRANSACTION_FAILED
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class Err:
    """异常快捷创建

    使用示例:
        raise Err.not_found("分类不存在")
        raise Err.conflict("别名已存在", field="slug")
    """

    not_found = ResourceNotFoundException
    conflict = ResourceConflictException
    invalid = ValidationException
    fail = BusinessException
