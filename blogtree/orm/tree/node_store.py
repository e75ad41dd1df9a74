"""树节点存储

把邻接表模型（TreeNodeMixin）包装成树形引擎需要的最小存储接口：
    - 按 ID 单点读取（可加行锁）
    - 按 parent_id 读取同级分组（按 sort_order 排序）
    - 按区间条件批量平移 sort_order（参数化 UPDATE）
    - 重新编号整个同级分组

所有方法都在调用方提供的 session 中执行，不自行提交。
"""

from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from blogtree.log import get_logger
from .order_allocator import RangeShift

logger = get_logger("blogtree.orm.tree")


class NodeStore:
    """树节点存储

    Args:
        model: 继承 TreeNodeMixin 的模型类
        session: SQLAlchemy Session
        lock: 读取时是否加行锁（SELECT ... FOR UPDATE，SQLite 下自动忽略）

    使用示例:
        store = NodeStore(Category, session, lock=True)
        node = store.get(5)
        store.apply_shift(RangeShift(parent_id=None, delta=1, lower=10))
    """

    def __init__(self, model: Type, session: Session, lock: bool = False):
        self.model = model
        self.session = session
        self.lock = lock

    # ==================== 内部方法 ====================

    def _group_filter(self, parent_id: Optional[Any]):
        column = self.model.parent_id
        return column.is_(None) if parent_id is None else column == parent_id

    def _locked(self, stmt):
        return stmt.with_for_update() if self.lock else stmt

    # ==================== 读取 ====================

    def get(self, node_id: Any):
        """单点读取，不存在返回 None"""
        if node_id is None:
            return None
        stmt = self._locked(select(self.model).where(self.model.id == node_id))
        stmt = stmt.execution_options(populate_existing=True)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_parent_id(self, node_id: Any) -> Optional[Any]:
        """读取父节点 ID，节点不存在时返回 None（供环检测逐级回溯）"""
        stmt = self._locked(select(self.model.parent_id).where(self.model.id == node_id))
        return self.session.execute(stmt).scalar_one_or_none()

    def count(self) -> int:
        return self.session.execute(select(func.count(self.model.id))).scalar_one()

    def max_order(self, parent_id: Optional[Any], exclude_id: Optional[Any] = None) -> Optional[int]:
        """分组内最大序号，空分组返回 None"""
        stmt = select(func.max(self.model.sort_order)).where(self._group_filter(parent_id))
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def next_order(self, parent_id: Optional[Any], order: int, exclude_id: Optional[Any] = None) -> Optional[int]:
        """分组内大于 order 的最小序号（后继），没有则返回 None"""
        stmt = select(func.min(self.model.sort_order)).where(
            self._group_filter(parent_id),
            self.model.sort_order > order,
        )
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def sibling_orders(self, parent_id: Optional[Any]) -> List[Tuple[Any, int]]:
        """分组内所有 (id, sort_order)，按 (sort_order, id) 排序"""
        stmt = self._locked(
            select(self.model.id, self.model.sort_order)
            .where(self._group_filter(parent_id))
            .order_by(self.model.sort_order, self.model.id)
        )
        return [(row.id, row.sort_order) for row in self.session.execute(stmt)]

    def children(self, parent_id: Any) -> List:
        stmt = self._locked(
            select(self.model)
            .where(self.model.parent_id == parent_id)
            .order_by(self.model.sort_order, self.model.id)
        )
        return list(self.session.execute(stmt).scalars())

    # ==================== 写入 ====================

    def apply_shift(self, shift: Optional[RangeShift]) -> int:
        """执行区间平移，返回受影响的行数"""
        if shift is None or shift.delta == 0 or shift.is_empty():
            return 0

        # 先 flush 挂起的属性修改，避免与批量 UPDATE 交错
        self.session.flush()

        conditions = [self._group_filter(shift.parent_id)]
        if shift.lower is not None:
            conditions.append(self.model.sort_order >= shift.lower)
        if shift.upper is not None:
            conditions.append(self.model.sort_order <= shift.upper)
        if shift.exclude_id is not None:
            conditions.append(self.model.id != shift.exclude_id)

        stmt = (
            update(self.model)
            .where(*conditions)
            .values(sort_order=self.model.sort_order + shift.delta)
            .execution_options(synchronize_session="fetch")
        )
        rowcount = self.session.execute(stmt).rowcount
        logger.debug(
            f"{self.model.__name__} 分组 parent_id={shift.parent_id} "
            f"区间 [{shift.lower}, {shift.upper}] 平移 {shift.delta:+d}，影响 {rowcount} 行"
        )
        return rowcount

    def set_position(self, node, parent_id: Optional[Any], order: int) -> None:
        node.parent_id = parent_id
        node.sort_order = order
        self.session.add(node)
        self.session.flush()

    def renumber_group(self, parent_id: Optional[Any], new_orders: Dict[Any, int]) -> int:
        """按 {id: order} 写回分组序号，只更新发生变化的行"""
        if not new_orders:
            return 0
        self.session.flush()
        changed = 0
        current = dict(self.sibling_orders(parent_id))
        for node_id, order in new_orders.items():
            if current.get(node_id) == order:
                continue
            self.session.execute(
                update(self.model)
                .where(self.model.id == node_id)
                .values(sort_order=order)
                .execution_options(synchronize_session="fetch")
            )
            changed += 1
        logger.debug(f"{self.model.__name__} 分组 parent_id={parent_id} 重新编号，更新 {changed} 行")
        return changed


__all__ = [
    "NodeStore",
]
