"""树形结构变更

TreeMutator 是移动节点的唯一入口：在一个事务内完成
参数校验 → 环检测 → 序号分配 → 写入，任何一步失败都整体回滚。

使用示例:
    from blogtree.orm.tree import TreeMutator, Position

    mutator = TreeMutator(Category, session)

    # 放到 Y 之前
    mutator.move(z.id, Position.BEFORE, reference_id=y.id)

    # 作为 P2 的最后一个子节点
    mutator.move(m.id, Position.INSIDE, new_parent_id=p2.id)

    # 移到根级别末尾
    mutator.move(m.id, Position.ROOT)
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Type, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blogtree.exceptions import (
    CycleError,
    NodeNotFoundError,
    SelfParentError,
    TreeTransactionError,
    ValidationException,
)
from blogtree.log import get_logger
from ..transaction import transaction_manager
from .cycle_guard import would_create_cycle
from .node_store import NodeStore
from .order_allocator import (
    DEFAULT_STEP,
    Position,
    append_order,
    close_gap,
    has_duplicates,
    needs_renumber,
    place_relative,
    renumber,
)

logger = get_logger("blogtree.orm.tree")


@dataclass
class MoveResult:
    """一次移动的结果"""
    node_id: Any
    old_parent_id: Optional[Any]
    new_parent_id: Optional[Any]
    old_order: int
    new_order: int
    renumbered_groups: List[Optional[Any]] = field(default_factory=list)

    @property
    def parent_changed(self) -> bool:
        return self.old_parent_id != self.new_parent_id

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "old_parent_id": self.old_parent_id,
            "new_parent_id": self.new_parent_id,
            "old_order": self.old_order,
            "new_order": self.new_order,
            "renumbered_groups": list(self.renumbered_groups),
        }


class TreeMutator:
    """树节点移动器

    无状态，每次 move 都是独立事务；在外层事务中调用时加入外层事务。

    Args:
        model: 继承 TreeNodeMixin 的模型类
        session: 数据库会话，不传则使用 model.query.session
        step: 追加节点与重新编号时的序号步长
        renumber_on_exhaustion: 相邻序号没有空隙时是否重新编号分组（重复序号总会重新编号）
    """

    def __init__(
        self,
        model: Type,
        session: Session = None,
        step: int = DEFAULT_STEP,
        renumber_on_exhaustion: bool = True,
    ):
        self.model = model
        self._session = session
        self.step = step
        self.renumber_on_exhaustion = renumber_on_exhaustion

    @property
    def session(self) -> Session:
        if self._session is None:
            self._session = self.model.query.session
        return self._session

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # ==================== 公开方法 ====================

    def move(
        self,
        moving_id: Any,
        position: Union[Position, str],
        reference_id: Optional[Any] = None,
        new_parent_id: Optional[Any] = None,
    ) -> MoveResult:
        """移动节点

        Args:
            moving_id: 要移动的节点
            position: before / after / inside / root
            reference_id: before/after 的参照节点；inside 未给 new_parent_id 时作为目标父节点
            new_parent_id: inside 的目标父节点

        Raises:
            NodeNotFoundError: 移动节点、参照节点或目标父节点不存在
            ValidationException: 缺少必要参数
            SelfParentError: 节点会成为自己的父节点，或相对自己定位
            CycleError: 移动会形成环
            TreeTransactionError: 写入失败（已回滚）
        """
        position = Position(position)
        try:
            with transaction_manager.transaction(session=self.session):
                return self._move(moving_id, position, reference_id, new_parent_id)
        except SQLAlchemyError as e:
            logger.error(f"{self.model_name} 移动失败，已回滚: {e}")
            raise TreeTransactionError(
                f"{self.model_name} 排序更新失败",
                node_id=moving_id,
            ) from e

    def append_order(self, parent_id: Optional[Any]) -> int:
        """新建节点时的序号：分组最大序号 + step"""
        store = NodeStore(self.model, self.session)
        return append_order(store.max_order(parent_id), self.step)

    def normalize_group(self, parent_id: Optional[Any], force: bool = False) -> bool:
        """分组序号出现重复或耗尽时按 step 重新编号

        Returns:
            是否执行了重新编号
        """
        store = NodeStore(self.model, self.session, lock=True)
        return self._renumber_if_needed(store, parent_id, force=force)

    def check_parent(self, node_id: Any, candidate_parent_id: Optional[Any]) -> None:
        """校验把 node_id 挂到 candidate_parent_id 下是否合法（不写入）"""
        store = NodeStore(self.model, self.session, lock=True)
        if candidate_parent_id is None:
            return
        if store.get(candidate_parent_id) is None:
            raise NodeNotFoundError(candidate_parent_id, model_name=self.model_name, message=f"父{self.model_name}不存在: {candidate_parent_id}")
        self._check_structure(store, node_id, candidate_parent_id)

    # ==================== 内部实现 ====================

    def _require(self, store: NodeStore, node_id: Any, role: str):
        node = store.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id, model_name=self.model_name, message=f"{role}不存在: {node_id}")
        return node

    def _check_structure(self, store: NodeStore, moving_id: Any, target_parent_id: Optional[Any]) -> None:
        if target_parent_id == moving_id:
            raise SelfParentError(moving_id)
        if would_create_cycle(moving_id, target_parent_id, store.get_parent_id, store.count()):
            raise CycleError(moving_id, target_parent_id)

    def _move(self, moving_id, position: Position, reference_id, new_parent_id) -> MoveResult:
        store = NodeStore(self.model, self.session, lock=True)

        # 1. 移动节点必须存在
        mover = self._require(store, moving_id, "移动节点")
        old_parent_id = mover.parent_id
        old_order = mover.sort_order

        # 2. 参照节点 / 目标父节点必须存在
        reference = None
        if position.is_relative:
            if reference_id is None:
                raise ValidationException(f"{position.value} 需要参照节点", details=["reference_id 不能为空"])
            reference = self._require(store, reference_id, "参照节点")
            target_parent_id = reference.parent_id
        elif position == Position.INSIDE:
            target_parent_id = new_parent_id if new_parent_id is not None else reference_id
            if target_parent_id is None:
                raise ValidationException("inside 需要目标父节点", details=["new_parent_id 不能为空"])
            self._require(store, target_parent_id, "目标父节点")
        else:
            target_parent_id = None

        # 3. 不能相对自己定位，也不能成为自己的父节点
        if position.is_relative and reference_id == moving_id:
            raise SelfParentError(moving_id, message="不能相对节点自身进行排序")

        # 4. 环检测
        self._check_structure(store, moving_id, target_parent_id)

        logger.debug(
            f"{self.model_name} 移动计划: id={moving_id} {position.value} "
            f"reference={reference_id} parent {old_parent_id} -> {target_parent_id}"
        )

        same_group = old_parent_id == target_parent_id
        touched = [target_parent_id] if same_group else [old_parent_id, target_parent_id]

        if not same_group:
            # 收回原分组中留下的空位
            store.apply_shift(close_gap(
                old_parent_id,
                old_order,
                store.next_order(old_parent_id, old_order, exclude_id=moving_id),
                exclude_id=moving_id,
            ))

        if position.is_relative:
            # 参照节点的序号可能已被上一步平移，重新读取
            target_order = store.get(reference.id).sort_order
            new_order, shift = place_relative(
                position,
                target_parent_id,
                old_order,
                target_order,
                same_group,
                mover_id=moving_id,
            )
            store.apply_shift(shift)
        else:
            if same_group:
                store.apply_shift(close_gap(
                    old_parent_id,
                    old_order,
                    store.next_order(old_parent_id, old_order, exclude_id=moving_id),
                    exclude_id=moving_id,
                ))
            new_order = append_order(store.max_order(target_parent_id, exclude_id=moving_id), self.step)

        store.set_position(mover, target_parent_id, new_order)

        renumbered = [
            parent_id for parent_id in touched
            if self._renumber_if_needed(store, parent_id)
        ]

        final_order = store.get(moving_id).sort_order
        logger.info(
            f"{self.model_name} 已移动: id={moving_id} parent {old_parent_id} -> {target_parent_id}, "
            f"order {old_order} -> {final_order}"
        )
        return MoveResult(
            node_id=moving_id,
            old_parent_id=old_parent_id,
            new_parent_id=target_parent_id,
            old_order=old_order,
            new_order=final_order,
            renumbered_groups=renumbered,
        )

    def _renumber_if_needed(self, store: NodeStore, parent_id: Optional[Any], force: bool = False) -> bool:
        # 重复序号总是重新编号，renumber_on_exhaustion 只控制无空隙的情况
        self.session.flush()
        items = store.sibling_orders(parent_id)
        orders = [order for _, order in items]
        if not force and not has_duplicates(orders):
            if not (self.renumber_on_exhaustion and needs_renumber(orders)):
                return False
        store.renumber_group(parent_id, renumber(items, self.step))
        return True


__all__ = [
    "MoveResult",
    "TreeMutator",
]
