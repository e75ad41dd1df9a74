"""事务传播行为"""

from enum import Enum


class TransactionPropagation(str, Enum):
    """已有事务时 transaction() 的行为，见 TransactionManager"""

    REQUIRED = "required"
    REQUIRES_NEW = "requires_new"
    NESTED = "nested"
    MANDATORY = "mandatory"
    NEVER = "never"
