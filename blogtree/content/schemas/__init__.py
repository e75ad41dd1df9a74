from .category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryReorder,
    CategoryOrderItem,
    CategoryBulkUpdate,
    CategoryDTO,
)
from .menu import (
    MenuCreate,
    MenuUpdate,
    MenuReorder,
    MenuDTO,
)

__all__ = [
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryReorder",
    "CategoryOrderItem",
    "CategoryBulkUpdate",
    "CategoryDTO",
    "MenuCreate",
    "MenuUpdate",
    "MenuReorder",
    "MenuDTO",
]
