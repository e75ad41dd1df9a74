"""内容模型"""

from .category import Category
from .menu import Menu
from .post import Post

__all__ = [
    "Category",
    "Menu",
    "Post",
]
