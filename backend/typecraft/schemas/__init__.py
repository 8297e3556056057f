"""Pydantic schemas for API validation."""

from .category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    FlatCategory,
    CategoryDeleteResponse,
)
from .text import (
    TextSummary,
    TextResponse,
    TextListResponse,
    NewTextContext,
    EditTextContext,
    OrderRequest,
    ProgressRequest,
    PracticeResponse,
    SummaryResponse,
)

__all__ = [
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "FlatCategory",
    "CategoryDeleteResponse",
    "TextSummary",
    "TextResponse",
    "TextListResponse",
    "NewTextContext",
    "EditTextContext",
    "OrderRequest",
    "ProgressRequest",
    "PracticeResponse",
    "SummaryResponse",
]
