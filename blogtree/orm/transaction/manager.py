"""事务管理器

transaction_manager.transaction() 是开启事务的统一入口，
当前事务保存在 ContextVar 中，每个请求（协程）互不影响。
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from blogtree.log import get_logger

from .context import TransactionContext
from .exceptions import PropagationError
from .propagation import TransactionPropagation

logger = get_logger("blogtree.orm.transaction")

_current_transaction: ContextVar[Optional[TransactionContext]] = ContextVar(
    "blogtree_current_transaction", default=None
)


def get_current_transaction() -> Optional[TransactionContext]:
    """当前事务上下文，不在事务中返回 None"""
    return _current_transaction.get()


class TransactionManager:
    """事务管理器（单例）

    传播行为:
        REQUIRED      有事务则加入，没有则新建（默认）
        REQUIRES_NEW  有事务时在其中开保存点，没有则新建
        NESTED        必须有外层事务，在其中开保存点
        MANDATORY     必须有外层事务，加入
        NEVER         不能有外层事务

    使用示例:
        from blogtree.orm import transaction_manager as tm

        with tm.transaction(session=session) as tx:
            store.apply_shift(shift)
            store.set_position(node, parent_id, order)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    suppress_commit_by_default = True

    @property
    def current_transaction(self) -> Optional[TransactionContext]:
        return _current_transaction.get()

    def is_in_transaction(self) -> bool:
        tx = self.current_transaction
        return tx is not None and tx.is_active

    def should_suppress_commit(self) -> bool:
        tx = self.current_transaction
        return tx is not None and tx.should_suppress_commit()

    @contextmanager
    def _join(self, current: TransactionContext) -> Iterator[TransactionContext]:
        # 异常穿过内层直接交给外层上下文回滚
        current.begin()
        try:
            yield current
        finally:
            current.leave()

    @contextmanager
    def transaction(
        self,
        session: Session = None,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        auto_commit: bool = True,
        suppress_commit: bool = None,
    ) -> Iterator[TransactionContext]:
        """开启或加入事务

        上下文内抛出的任何异常都会回滚事务并继续向外传播。

        Args:
            session: 数据库会话，不传则使用当前请求的 session
            propagation: 传播行为
            auto_commit: 最外层正常退出时是否提交
            suppress_commit: 是否抑制事务内 model.save(commit=True) 的提交

        Raises:
            PropagationError: 外层事务的有无不满足传播行为要求
        """
        propagation = TransactionPropagation(propagation)
        current = self.current_transaction
        active = current is not None and current.is_active

        if active:
            if propagation == TransactionPropagation.NEVER:
                raise PropagationError(propagation.name, "不能在事务中执行")
            if propagation in (TransactionPropagation.REQUIRES_NEW, TransactionPropagation.NESTED):
                logger.debug(f"{propagation.name}: 在当前事务中创建保存点")
                with current.savepoint():
                    yield current
                return
            with self._join(current) as tx:
                yield tx
            return

        if propagation == TransactionPropagation.MANDATORY:
            raise PropagationError(propagation.name, "必须在事务中执行")
        if propagation == TransactionPropagation.NESTED:
            raise PropagationError(propagation.name, "需要一个活跃的外层事务")

        if session is None:
            from ..db_session import db_manager
            session = db_manager.get_session()
        if suppress_commit is None:
            suppress_commit = self.suppress_commit_by_default

        ctx = TransactionContext(
            session,
            auto_commit=auto_commit,
            propagation=propagation,
            suppress_commit=suppress_commit,
        )
        token = _current_transaction.set(ctx)
        try:
            with ctx:
                yield ctx
        finally:
            _current_transaction.reset(token)


transaction_manager = TransactionManager()
