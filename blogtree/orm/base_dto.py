"""数据传输对象基类

DTO 把 ORM 实体转换为响应数据：只保留声明的字段，时间格式化为字符串，
统计字段等实体上没有的值通过 from_entity 的关键字参数传入。
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from .tree.tree_utils import build_tree_list, by_sort_order

T = TypeVar('T', bound='DTO')

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    return value


class DTO(BaseModel):
    """DTO 基类

    使用示例::

        class MenuDTO(DTO):
            id: int
            name: str
            parent_id: Optional[int] = None
            sort_order: int = 0

        MenuDTO.from_entity(menu)
        MenuDTO.from_list(menus)
        MenuDTO.from_tree(menus)   # 嵌套字典，同级按 (sort_order, id) 排序
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra='ignore',
    )

    @classmethod
    def from_entity(cls: Type[T], entity: Any, **overrides) -> T:
        values = {
            name: overrides[name] if name in overrides else _plain(getattr(entity, name))
            for name in cls.model_fields
            if name in overrides or hasattr(entity, name)
        }
        return cls(**values)

    @classmethod
    def from_list(cls: Type[T], items: Optional[Iterable[Any]]) -> List[T]:
        return [cls.from_entity(item) for item in items or ()]

    @classmethod
    def from_dict(cls: Type[T], data: Optional[Dict[str, Any]]) -> T:
        """忽略未声明的键"""
        return cls.model_validate({key: _plain(value) for key, value in (data or {}).items()})

    @classmethod
    def from_tree(cls, items: Optional[Iterable[Any]], children_key: str = 'children') -> List[Dict[str, Any]]:
        """扁平列表（实体或 DTO）构建为嵌套树"""
        nodes = [
            (item if isinstance(item, DTO) else cls.from_entity(item)).to_dict()
            for item in items or ()
        ]
        return build_tree_list(nodes, children_field=children_key, sort_key=by_sort_order)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
