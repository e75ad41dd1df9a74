"""事务管理模块

- 嵌套事务（Savepoint）支持
- 事务传播行为（REQUIRED, REQUIRES_NEW, NESTED 等）
- 提交抑制机制（事务上下文中自动忽略 commit=True）

使用示例:
    from blogtree.orm import transaction_manager as tm

    with tm.transaction() as tx:
        category.add()

        @tx.after_commit
        def on_committed(ctx):
            ...
"""

from .state import TransactionState
from .exceptions import (
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
    PropagationError,
)
from .propagation import TransactionPropagation
from .context import (
    TransactionContext,
    SavepointContext,
)
from .manager import (
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

__all__ = [
    "TransactionState",

    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "TransactionAlreadyRolledBackError",
    "PropagationError",

    "TransactionPropagation",

    "TransactionContext",
    "SavepointContext",

    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
