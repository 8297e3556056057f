"""Data access repositories."""

from .base import BaseRepository
from .text_repository import TextRepository
from .category_repository import CategoryRepository

__all__ = [
    "BaseRepository",
    "TextRepository",
    "CategoryRepository",
]
