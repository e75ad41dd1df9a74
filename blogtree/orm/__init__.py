"""ORM模块

- CoreModel: 模型基类，包含自增ID、时间戳与CRUD
- DTO: 数据传输对象基类
- 数据库会话管理（按请求划分的 scoped_session）
- 事务管理（传播行为、保存点、提交抑制）
- 树形结构（有序邻接表、环检测、节点移动）

使用示例:
    from blogtree.orm import CoreModel, init_database, get_db

    init_database("sqlite:///./blog.db")

    @router.get("/list")
    async def list_categories(db: Session = Depends(get_db)):
        return Category.query.all()
"""

from .base_dto import DTO
from .core_model import Base, CoreModel
from .db_session import (
    db_manager,
    init_database,
    get_engine,
    get_db,
    on_request_end,
    db_session_scope,
)

# 事务管理
from .transaction import (
    TransactionState,
    TransactionPropagation,
    TransactionContext,
    SavepointContext,
    TransactionManager,
    transaction_manager,
    get_current_transaction,
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
    PropagationError,
)

# 树形结构
from .tree import (
    TreeNodeMixin,
    TreeMutator,
    MoveResult,
    NodeStore,
    Position,
    RangeShift,
    would_create_cycle,
    is_descendant,
    build_tree_list,
    flatten_tree,
)

__all__ = [
    "DTO",
    "Base",
    "CoreModel",

    "db_manager",
    "init_database",
    "get_engine",
    "get_db",
    "on_request_end",
    "db_session_scope",

    "TransactionState",
    "TransactionPropagation",
    "TransactionContext",
    "SavepointContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "TransactionAlreadyRolledBackError",
    "PropagationError",

    "TreeNodeMixin",
    "TreeMutator",
    "MoveResult",
    "NodeStore",
    "Position",
    "RangeShift",
    "would_create_cycle",
    "is_descendant",
    "build_tree_list",
    "flatten_tree",
]
