"""Text schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, List, Optional

from .category import CategoryResponse, FlatCategory


class TextSummary(BaseModel):
    """A text as listed inside a folder (no content)."""
    id: int
    title: str
    category_id: Optional[int] = None
    progress_index: int
    order_index: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TextResponse(TextSummary):
    """A full text, including its content."""
    content: str
    updated_at: Optional[datetime] = None


class Breadcrumb(BaseModel):
    id: int
    name: str


class TextListResponse(BaseModel):
    """Contents of one folder plus page context."""
    current_category_id: Optional[int] = None
    texts: List[TextSummary]
    categories: List[CategoryResponse]
    breadcrumbs: List[Breadcrumb]
    all_categories_flat: List[FlatCategory]
    message: Optional[str] = None


class NewTextContext(BaseModel):
    """What the add-text form needs before anything is submitted."""
    form: str = "add_text"
    error: Optional[str] = None
    title: str = ""
    content: str = ""
    categories: List[FlatCategory]
    selected_folder_id: Optional[int] = None


class EditTextContext(BaseModel):
    form: str = "edit_text"
    error: Optional[str] = None
    text: TextResponse
    categories: List[FlatCategory]


class OrderRequest(BaseModel):
    """Body of ``POST /texts/order``. Validated by hand so a non-list gets
    the same message the page script expects."""
    order: Any = None


class ProgressRequest(BaseModel):
    """Body of ``POST /practice/progress``. Validated by hand for the same reason."""
    text_id: Any = None
    progress_index: Any = None


class PracticeResponse(BaseModel):
    user: dict
    text: TextResponse


class SummaryResponse(BaseModel):
    message: str = "Summary created successfully"
    new_text_id: int = Field(..., serialization_alias="newTextId")
    new_text_title: str = Field(..., serialization_alias="newTextTitle")
