"""Category (folder) schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class CategoryCreate(BaseModel):
    """Schema for creating a folder. The name is checked by CategoryService."""
    name: str = ""
    parent_id: Optional[int] = None


class CategoryUpdate(BaseModel):
    """Rename and/or move a folder. ``move_to_root`` distinguishes "move to the
    top level" from "leave the parent alone"."""
    name: Optional[str] = None
    parent_id: Optional[int] = None
    move_to_root: bool = False


class CategoryResponse(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FlatCategory(BaseModel):
    """One row of the depth-first folder listing used by dropdowns."""
    id: int
    name: str
    parent_id: Optional[int] = None
    depth: int
    path: str


class CategoryDeleteResponse(BaseModel):
    """Result of deleting a folder."""
    deleted_categories: int
    affected_texts: int
    action: str
