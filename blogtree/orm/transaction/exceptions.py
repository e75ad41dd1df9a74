"""事务异常

与业务异常（blogtree.exceptions）分开：这些异常表示事务 API 的误用，
不会被转换为业务响应。
"""


class TransactionError(Exception):
    default_message = "事务错误"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class TransactionNotActiveError(TransactionError):
    default_message = "事务未激活"


class TransactionAlreadyCommittedError(TransactionError):
    default_message = "事务已提交，无法执行此操作"


class TransactionAlreadyRolledBackError(TransactionError):
    default_message = "事务已回滚，无法执行此操作"


class PropagationError(TransactionError):
    """外层事务的有无不满足传播行为要求"""

    def __init__(self, propagation: str, message: str):
        self.propagation = propagation
        super().__init__(f"[{propagation}] {message}")
