"""Database models."""

from .user import User
from .category import Category
from .text import Text

__all__ = ["User", "Category", "Text"]
