"""博客分类模型"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogtree.orm import CoreModel
from blogtree.orm.tree import TreeNodeMixin


class Category(CoreModel, TreeNodeMixin):
    """文章分类

    字段说明:
        - name: 分类名称（唯一）
        - slug: URL 别名（唯一），slug 为 uncategorized 的分类是兜底分类
        - description: 描述
        - parent_id / sort_order: 继承自 TreeNodeMixin

    层级与排序只能通过 TreeMutator 修改。
    """
    __tablename__ = "category"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, comment="分类名称")
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True, comment="URL别名")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="描述")

    @classmethod
    def get_by_slug(cls, slug: str) -> Optional["Category"]:
        return cls.query.filter(cls.slug == slug).first()

    def __repr__(self):
        return f"<Category id={self.id} slug={self.slug!r}>"
