"""事务上下文

TransactionContext 对应一次最外层事务，内层 REQUIRED 调用只增加嵌套深度；
SavepointContext 对应事务内的一个 SAVEPOINT。
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, List, TYPE_CHECKING

from sqlalchemy.orm import Session

from blogtree.log import get_logger

from .exceptions import (
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
    TransactionNotActiveError,
)
from .propagation import TransactionPropagation
from .state import TransactionState

if TYPE_CHECKING:
    from sqlalchemy.orm.session import SessionTransaction

logger = get_logger("blogtree.orm.transaction")

Hook = Callable[["TransactionContext"], None]


def _run_hooks(kind: str, hooks: List[Hook], ctx: "TransactionContext") -> None:
    # 事务结果已确定，回调失败只记录
    for hook in hooks:
        try:
            hook(ctx)
        except Exception as e:
            logger.warning(f"{kind} 回调 {getattr(hook, '__name__', hook)} 失败: {e}")


class SavepointContext:
    """保存点

    由 TransactionContext.savepoint() 创建，正常退出时释放，异常时回滚到保存点。
    """

    def __init__(self, name: str, nested: 'SessionTransaction'):
        self.name = name
        self._nested = nested
        self._state = TransactionState.ACTIVE

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == TransactionState.ACTIVE

    def _finish(self, action: Callable[[], None], done: TransactionState) -> None:
        if not self.is_active:
            return
        try:
            action()
        except Exception:
            self._state = TransactionState.FAILED
            logger.error(f"保存点 {self.name} {done.value} 失败")
            raise
        self._state = done
        logger.debug(f"保存点 {self.name}: {done.value}")

    def release(self) -> None:
        self._finish(self._nested.commit, TransactionState.COMMITTED)

    def rollback(self) -> None:
        self._finish(self._nested.rollback, TransactionState.ROLLED_BACK)


class TransactionContext:
    """一次事务的状态、嵌套深度、回调与提交抑制

    提交抑制：事务内 model.save(commit=True) 只 flush，由最外层统一提交；
    allow_commit() 可以临时解除。

    使用示例:
        with TransactionContext(session) as tx:
            node.save(commit=True)   # 只 flush

            @tx.after_commit
            def notify(ctx):
                logger.info("排序已更新")
    """

    def __init__(
        self,
        session: Session,
        auto_commit: bool = True,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        suppress_commit: bool = True,
    ):
        self._session = session
        self._auto_commit = auto_commit
        self._propagation = propagation
        self._suppress_commit = suppress_commit
        self._state = TransactionState.INACTIVE
        self._depth = 0
        self._commit_allowed = 0
        self._savepoints = 0
        self._after_commit: List[Hook] = []
        self._after_rollback: List[Hook] = []

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == TransactionState.ACTIVE

    @property
    def nesting_level(self) -> int:
        return self._depth

    @property
    def propagation(self) -> TransactionPropagation:
        return self._propagation

    @property
    def suppress_commit(self) -> bool:
        return self._suppress_commit and self._commit_allowed == 0

    # ==================== 生命周期 ====================

    def begin(self) -> 'TransactionContext':
        self._depth += 1
        if self._depth == 1:
            # session 自动开启底层事务
            self._state = TransactionState.ACTIVE
            logger.debug("事务开始")
        return self

    def leave(self) -> None:
        """退出一层嵌套（不提交）"""
        if self._depth > 1:
            self._depth -= 1

    def commit(self) -> None:
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError()
        if self._state == TransactionState.ROLLED_BACK:
            raise TransactionAlreadyRolledBackError()
        if self._state != TransactionState.ACTIVE:
            raise TransactionNotActiveError(f"无法提交：事务状态为 {self._state.value}")
        if self._depth > 1:
            self.leave()
            return
        try:
            self._session.commit()
        except Exception:
            self._state = TransactionState.FAILED
            raise
        self._state = TransactionState.COMMITTED
        self._depth = 0
        logger.debug("事务已提交")
        _run_hooks("after_commit", self._after_commit, self)

    def rollback(self) -> None:
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError("无法回滚：事务已提交")
        if not self._state.can_rollback():
            return
        try:
            self._session.rollback()
        except Exception as e:
            self._state = TransactionState.FAILED
            logger.error(f"事务回滚失败: {e}")
            raise
        self._state = TransactionState.ROLLED_BACK
        self._depth = 0
        logger.debug("事务已回滚")
        _run_hooks("after_rollback", self._after_rollback, self)

    def __enter__(self) -> 'TransactionContext':
        return self.begin()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        elif self._depth > 1:
            self.leave()
        elif self._auto_commit:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        return False

    # ==================== 保存点 ====================

    @contextmanager
    def savepoint(self, name: str = None):
        """在当前事务中创建保存点

        使用示例:
            with tx.savepoint("seed") as sp:
                ...
        """
        if not self.is_active:
            raise TransactionNotActiveError("无法创建保存点：事务未激活")
        if name is None:
            self._savepoints += 1
            name = f"sp_{self._savepoints}"

        sp = SavepointContext(name, self._session.begin_nested())
        try:
            yield sp
        except Exception:
            sp.rollback()
            raise
        sp.release()

    # ==================== 提交抑制与回调 ====================

    @contextmanager
    def allow_commit(self):
        """临时让 commit=True 生效"""
        self._commit_allowed += 1
        try:
            yield
        finally:
            self._commit_allowed -= 1

    def should_suppress_commit(self) -> bool:
        return self.is_active and self.suppress_commit

    def after_commit(self, func: Hook) -> Hook:
        self._after_commit.append(func)
        return func

    def after_rollback(self, func: Hook) -> Hook:
        self._after_rollback.append(func)
        return func

    def __repr__(self) -> str:
        return (
            f"<TransactionContext state={self._state.value} depth={self._depth} "
            f"suppress_commit={self.suppress_commit}>"
        )
