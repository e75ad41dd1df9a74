"""文章模型

只包含分类统计与分类删除时需要的字段。
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from blogtree.orm import CoreModel


class Post(CoreModel):
    """文章"""
    __tablename__ = "post"

    title: Mapped[str] = mapped_column(String(200), nullable=False, comment="标题")
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, comment="URL别名")
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, comment="是否已发布")
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("category.id"),
        nullable=True,
        index=True,
        comment="所属分类ID"
    )
