"""
内容模块 (Content Module)

博客的分类与导航菜单：两棵按 sort_order 排序的有序森林，
所有层级与排序变更都经由 blogtree.orm.tree.TreeMutator。

使用示例:
    from blogtree.content import CategoryService, create_content_router

    app.include_router(create_content_router(), prefix="/api")
"""

from .models import Category, Menu, Post
from .services import CategoryService, MenuService, DEFAULT_CATEGORIES
from .api import create_content_router, create_category_router, create_menu_router
from .helpers import UNSET

__all__ = [
    "Category",
    "Menu",
    "Post",
    "CategoryService",
    "MenuService",
    "DEFAULT_CATEGORIES",
    "create_content_router",
    "create_category_router",
    "create_menu_router",
    "UNSET",
]
