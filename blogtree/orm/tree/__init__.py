"""树形结构模块

邻接表（parent_id + sort_order）实现的有序森林，用于分类与菜单。

主要组件:
- TreeNodeMixin: 树节点字段定义
- TreeMutator: 节点移动（before / after / inside / root），单事务完成
- NodeStore: 分组查询与区间平移
- cycle_guard / order_allocator: 环检测与序号分配（纯函数）
- 工具函数: build_tree_list, flatten_tree

使用示例:
    from blogtree.orm import CoreModel
    from blogtree.orm.tree import TreeNodeMixin, TreeMutator, Position

    class Category(CoreModel, TreeNodeMixin):
        __tablename__ = "category"
        name = mapped_column(String(100))

    TreeMutator(Category).move(3, Position.AFTER, reference_id=5)
"""

from .tree_fields import TreeNodeMixin
from .cycle_guard import ParentLookup, would_create_cycle, is_descendant
from .order_allocator import (
    DEFAULT_STEP,
    Position,
    RangeShift,
    append_order,
    close_gap,
    place_relative,
    has_duplicates,
    needs_renumber,
    renumber,
)
from .node_store import NodeStore
from .tree_mutator import MoveResult, TreeMutator
from .tree_utils import by_sort_order, build_tree_list, flatten_tree

__all__ = [
    "TreeNodeMixin",

    # 环检测
    "ParentLookup",
    "would_create_cycle",
    "is_descendant",

    # 序号分配
    "DEFAULT_STEP",
    "Position",
    "RangeShift",
    "append_order",
    "close_gap",
    "place_relative",
    "has_duplicates",
    "needs_renumber",
    "renumber",

    "NodeStore",
    "MoveResult",
    "TreeMutator",

    # 工具函数
    "by_sort_order",
    "build_tree_list",
    "flatten_tree",
]
