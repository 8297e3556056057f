"""API routes."""

from .auth_routes import router as auth_router
from .texts import router as texts_router
from .practice import router as practice_router
from .categories import router as categories_router

__all__ = [
    "auth_router",
    "texts_router",
    "practice_router",
    "categories_router",
]
