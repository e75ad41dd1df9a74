"""邻接表树节点字段

parent_id + sort_order 两列，以及同级查询的便捷方法。

使用示例:
    from blogtree.orm import CoreModel
    from blogtree.orm.tree import TreeNodeMixin

    class Category(CoreModel, TreeNodeMixin):
        __tablename__ = "category"
        name = mapped_column(String(100))
"""

from typing import List, Optional

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class TreeNodeMixin:
    """树节点字段与查询 Mixin

    提供字段：
    - parent_id: 指向同表主键的外键，NULL 表示根节点
    - sort_order: 同级排序号，只在同一 parent_id 分组内唯一

    外键目标由 __tablename__ 推导，子类无需重复定义 parent_id。
    结构变更（移动、重排）应通过 TreeMutator 完成，以保证无环与序号唯一。
    """

    @declared_attr
    def parent_id(cls) -> Mapped[Optional[int]]:
        return mapped_column(
            Integer,
            ForeignKey(f"{cls.__tablename__}.id"),
            nullable=True,
            default=None,
            index=True,
            comment="父节点ID"
        )

    @declared_attr
    def sort_order(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            default=0,
            nullable=False,
            index=True,
            comment="同级排序号"
        )

    @classmethod
    def _group(cls, parent_id: Optional[int]):
        """parent_id 分组的查询，按 (sort_order, id) 排序"""
        match = cls.parent_id.is_(None) if parent_id is None else cls.parent_id == parent_id
        return cls.query.filter(match).order_by(cls.sort_order, cls.id)

    def is_root(self) -> bool:
        return self.parent_id is None

    def is_leaf(self) -> bool:
        return self._group(self.id).first() is None

    def get_parent(self):
        return None if self.is_root() else type(self).get(self.parent_id)

    def get_children(self) -> List:
        """直接子节点，按排序号"""
        return self._group(self.id).all()

    def get_siblings(self) -> List:
        """同组的其他节点"""
        return self._group(self.parent_id).filter(type(self).id != self.id).all()


__all__ = [
    "TreeNodeMixin",
]
