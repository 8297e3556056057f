"""Categories API: the user's folder tree.

Single router for all folder operations. Delegates to CategoryService.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.auth import AuthContext, require_auth
from ..schemas.category import (
    CategoryCreate,
    CategoryDeleteResponse,
    CategoryResponse,
    CategoryUpdate,
    FlatCategory,
)
from ..services.category_service import CategoryService
from .dependencies import get_category_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    parent_id: Optional[int] = Query(None),
    auth: AuthContext = Depends(require_auth),
    service: CategoryService = Depends(get_category_service),
):
    """Direct children of a folder (top level when no parent is given)."""
    return service.list_children(auth, parent_id)


@router.get("/flat", response_model=List[FlatCategory])
def list_categories_flat(
    auth: AuthContext = Depends(require_auth),
    service: CategoryService = Depends(get_category_service),
):
    """Every folder, depth-first, with its depth and full path label."""
    return service.list_flat(auth)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    data: CategoryCreate,
    auth: AuthContext = Depends(require_auth),
    service: CategoryService = Depends(get_category_service),
):
    return service.create(auth, data)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    data: CategoryUpdate,
    auth: AuthContext = Depends(require_auth),
    service: CategoryService = Depends(get_category_service),
):
    """Rename and/or move a folder."""
    return service.update(auth, category_id, data)


@router.delete("/{category_id}", response_model=CategoryDeleteResponse)
def delete_category(
    category_id: int,
    action: str = Query("move_up", description="move_up or delete_all"),
    auth: AuthContext = Depends(require_auth),
    service: CategoryService = Depends(get_category_service),
):
    return service.delete(auth, category_id, action)
