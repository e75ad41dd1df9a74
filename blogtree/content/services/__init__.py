from .category_service import CategoryService, DEFAULT_CATEGORIES
from .menu_service import MenuService

__all__ = [
    "CategoryService",
    "MenuService",
    "DEFAULT_CATEGORIES",
]
