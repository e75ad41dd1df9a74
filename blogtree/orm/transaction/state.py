"""事务状态"""

from enum import Enum


class TransactionState(str, Enum):
    """INACTIVE → ACTIVE → COMMITTED / ROLLED_BACK，提交或回滚出错时为 FAILED"""

    INACTIVE = "inactive"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"

    def can_rollback(self) -> bool:
        return self in (TransactionState.ACTIVE, TransactionState.FAILED)
