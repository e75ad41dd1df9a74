"""
内容模块 - API 路由

使用示例:
    from blogtree.content.api import create_content_router

    app.include_router(create_content_router(settings.tree), prefix="/api")

    # 生成的路由:
    # GET  /api/categories/list, /api/categories/tree ...
    # GET  /api/menus/list, /api/menus/tree ...
"""

from typing import Optional

from fastapi import APIRouter

from blogtree.config import TreeSettings

from .category_api import create_category_router
from .menu_api import create_menu_router


def create_content_router(settings: Optional[TreeSettings] = None) -> APIRouter:
    router = APIRouter()
    router.include_router(create_category_router(settings), prefix="/categories", tags=["分类"])
    router.include_router(create_menu_router(settings), prefix="/menus", tags=["菜单"])
    return router


__all__ = [
    "create_content_router",
    "create_category_router",
    "create_menu_router",
]
