"""
ORM 基础模型

CoreModel 提供自增主键、按类名生成的表名、时间戳和常用 CRUD。
事务上下文中 commit=True 被抑制为 flush，由事务统一提交。
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, Integer, func, inspect
from sqlalchemy.orm import Mapped, Query, Session, declarative_base, declared_attr, mapped_column

if TYPE_CHECKING:
    from typing_extensions import Self

from blogtree.log import get_logger
from .utils import to_snake_case

logger = get_logger("blogtree.orm.model")

Base = declarative_base()


class CoreModel(Base):
    """模型基类

    使用示例:
        class Tag(CoreModel):
            name: Mapped[str] = mapped_column(String(50), unique=True)

        tag = Tag(name="python").save(commit=True)
        Tag.get(tag.id)
    """
    __abstract__ = True

    # 由 init_database() 设置为 scoped_session.query_property()
    if TYPE_CHECKING:
        query: ClassVar[Query[Self]]

    # 构造与 update() 时忽略的字段
    SYSTEM_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"id", "created_at", "updated_at"})

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return to_snake_case(cls.__name__)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, comment="主键")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), comment="创建时间"
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True, onupdate=func.now(), comment="更新时间"
    )

    def __init__(self, **kwargs):
        super().__init__(**{k: v for k, v in kwargs.items() if k not in self.SYSTEM_FIELDS})

    def __repr__(self):
        return f"<{type(self).__name__} id={self.id}>"

    @property
    def session(self) -> Session:
        """对象所在的 session，游离对象使用当前请求的 session"""
        bound = Session.object_session(self)
        if bound is not None:
            return bound
        query = getattr(type(self), "query", None)
        if query is not None:
            return query.session
        from .db_session import db_manager
        return db_manager.get_session()

    # ==================== CRUD ====================

    def save(self, commit: bool = False) -> Self:
        """加入 session；commit=True 时提交（事务内只 flush）"""
        self.session.add(self)
        self._finish(commit)
        return self

    def add(self, commit: bool = False) -> Self:
        """加入 session 并立即 flush 以获得 id"""
        session = self.session
        session.add(self)
        session.flush()
        self._finish(commit)
        return self

    def update(self, commit: bool = False, **fields) -> Self:
        """更新字段，跳过系统字段和模型上不存在的属性"""
        for key, value in fields.items():
            if key not in self.SYSTEM_FIELDS and hasattr(self, key):
                setattr(self, key, value)
        return self.save(commit=commit)

    def delete(self, commit: bool = False) -> None:
        session = self.session
        session.delete(self)
        self._finish(commit, refresh=False)

    @classmethod
    def get(cls, id: int) -> Optional[Self]:
        return cls.query.filter_by(id=id).first()

    @classmethod
    def get_all(cls) -> List[Self]:
        return cls.query.all()

    def to_dict(self, exclude: set = None) -> dict:
        exclude = exclude or set()
        return {
            attr.key: getattr(self, attr.key)
            for attr in inspect(self).mapper.column_attrs
            if attr.key not in exclude
        }

    # ==================== 提交控制 ====================

    def _finish(self, commit: bool, refresh: bool = True) -> None:
        if not commit:
            return
        session = self.session
        if self._commit_suppressed():
            session.flush()
            if refresh:
                session.refresh(self)
            return
        session.commit()

    @staticmethod
    def _commit_suppressed() -> bool:
        from .transaction import get_current_transaction
        tx = get_current_transaction()
        if tx is not None and tx.should_suppress_commit():
            logger.debug("事务中的 commit=True 已改为 flush")
            return True
        return False
