"""导航菜单模型"""

from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogtree.orm import CoreModel
from blogtree.orm.tree import TreeNodeMixin


class Menu(CoreModel, TreeNodeMixin):
    """导航菜单

    字段说明:
        - name: 菜单名称
        - url: 链接地址，为空表示只作为分组
        - is_external: 是否外部链接（新窗口打开）
        - is_active: 是否启用，未启用的菜单不出现在前台
    """
    __tablename__ = "menu"

    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="菜单名称")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="描述")
    url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, comment="链接地址")
    is_external: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, comment="是否外部链接")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, comment="是否启用")
