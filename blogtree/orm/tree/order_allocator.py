"""排序号分配

纯计算模块，不访问存储。根据放置意图计算移动节点的新序号，
以及需要整体平移的同级区间（RangeShift）。NodeStore 把 RangeShift
转换为带参数的批量 UPDATE：

    UPDATE t SET sort_order = sort_order + :delta
    WHERE parent_id = :parent_id
      AND sort_order BETWEEN :lower AND :upper
      AND id != :exclude_id

序号为整数，追加时留出 step 的间隙。相邻序号之间没有空隙时
（needs_renumber），按 step 重新编号整个同级分组。

使用示例:
    new_order, shift = place_relative(
        Position.BEFORE, parent_id=None,
        mover_order=20, target_order=10,
        same_group=True, mover_id=3,
    )
    # new_order == 10, shift == RangeShift(parent_id=None, delta=1, lower=10, upper=19, exclude_id=3)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

DEFAULT_STEP = 10


class Position(str, Enum):
    """放置意图"""

    BEFORE = "before"
    """放到参照节点之前（同一父节点下）"""

    AFTER = "after"
    """放到参照节点之后（同一父节点下）"""

    INSIDE = "inside"
    """作为目标父节点的最后一个子节点"""

    ROOT = "root"
    """追加到根级别末尾"""

    @property
    def is_relative(self) -> bool:
        return self in (Position.BEFORE, Position.AFTER)


@dataclass(frozen=True)
class RangeShift:
    """同级区间平移

    lower/upper 为闭区间边界，None 表示不限。
    """
    parent_id: Optional[Any]
    delta: int
    lower: Optional[int] = None
    upper: Optional[int] = None
    exclude_id: Optional[Any] = None

    def matches(self, order: int) -> bool:
        if self.lower is not None and order < self.lower:
            return False
        if self.upper is not None and order > self.upper:
            return False
        return True

    def is_empty(self) -> bool:
        return self.lower is not None and self.upper is not None and self.lower > self.upper


def append_order(max_order: Optional[int], step: int = DEFAULT_STEP) -> int:
    """追加到分组末尾的序号：最大序号 + step，空分组从 0 起算"""
    return (max_order or 0) + step


def close_gap(
    parent_id: Optional[Any],
    old_order: int,
    next_order: Optional[int],
    exclude_id: Optional[Any] = None,
) -> Optional[RangeShift]:
    """节点离开分组后，把后面的兄弟整体前移，收回留下的空位

    平移量为移动节点与其后继之间的间隙（next_order - old_order），
    [0, 10, 20] 去掉 10 之后得到 [0, 10]。

    Returns:
        RangeShift，节点原本在末尾时返回 None
    """
    if next_order is None or next_order <= old_order:
        return None
    return RangeShift(
        parent_id=parent_id,
        delta=-(next_order - old_order),
        lower=old_order + 1,
        exclude_id=exclude_id,
    )


def place_relative(
    position: Position,
    parent_id: Optional[Any],
    mover_order: Optional[int],
    target_order: int,
    same_group: bool,
    mover_id: Optional[Any] = None,
) -> Tuple[int, Optional[RangeShift]]:
    """计算 before/after 放置的新序号与需要平移的区间

    同组移动只平移原位置与目标位置之间的区间：
        - 下移（mover < target）：区间内序号 -1
        - 上移（mover > target）：区间内序号 +1
    跨组移动（或序号相同）时，在目标分组中为移动节点腾出位置：
        - before：>= target 的兄弟 +1，移动节点取 target
        - after：> target 的兄弟 +1，移动节点取 target + 1

    Returns:
        (new_order, shift)，shift 为 None 表示无需平移
    """
    if position not in (Position.BEFORE, Position.AFTER):
        raise ValueError(f"place_relative 只支持 before/after: {position}")

    before = position == Position.BEFORE

    if same_group and mover_order is not None and mover_order != target_order:
        if mover_order < target_order:
            upper = target_order - 1 if before else target_order
            new_order = target_order - 1 if before else target_order
            shift = RangeShift(parent_id, -1, mover_order + 1, upper, mover_id)
        else:
            lower = target_order if before else target_order + 1
            new_order = target_order if before else target_order + 1
            shift = RangeShift(parent_id, 1, lower, mover_order - 1, mover_id)
        return new_order, (None if shift.is_empty() else shift)

    if before:
        return target_order, RangeShift(parent_id, 1, target_order, None, mover_id)
    return target_order + 1, RangeShift(parent_id, 1, target_order + 1, None, mover_id)


def has_duplicates(orders: Iterable[int]) -> bool:
    orders = list(orders)
    return len(set(orders)) < len(orders)


def needs_renumber(orders: Iterable[int]) -> bool:
    """相邻序号之间没有空闲整数（差值 < 2，含重复）时需要重新编号"""
    ordered = sorted(orders)
    return any(b - a < 2 for a, b in zip(ordered, ordered[1:]))


def renumber(items: List[Tuple[Any, int]], step: int = DEFAULT_STEP) -> Dict[Any, int]:
    """按当前显示顺序重新编号

    Args:
        items: (id, order) 列表
        step: 编号步长

    Returns:
        {id: index * step}，保持 (order, id) 的先后顺序
    """
    ordered = sorted(items, key=lambda item: (item[1], item[0]))
    return {node_id: index * step for index, (node_id, _) in enumerate(ordered)}


__all__ = [
    "DEFAULT_STEP",
    "Position",
    "RangeShift",
    "append_order",
    "close_gap",
    "place_relative",
    "has_duplicates",
    "needs_renumber",
    "renumber",
]
