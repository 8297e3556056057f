"""Deep module for folder operations: create, rename, move, delete, list.

Every operation is scoped to the principal. A folder owned by someone else
is reported exactly like a missing one, so ids never leak.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.auth import AuthContext
from ..exceptions import (
    CategoryNotFoundError,
    CircularCategoryError,
    DatabaseError,
    ValidationError,
)
from ..models.category import Category
from ..repositories.category_repository import CategoryRepository
from ..repositories.text_repository import TextRepository
from ..schemas.category import CategoryCreate, CategoryDeleteResponse, CategoryUpdate

logger = logging.getLogger(__name__)

DELETE_ACTIONS = ("move_up", "delete_all")

MAX_NAME_LENGTH = 255


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Folder name cannot be empty.", field="name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError("Folder name is too long.", field="name")
    return name


class CategoryService:
    """All folder operations behind a simple interface.

    Public methods:
        list_children   -- direct children of a folder
        list_flat       -- depth-first listing for dropdowns
        create          -- new folder under an owned parent (or top level)
        update          -- rename and/or move; refuses cycles
        delete          -- move_up (re-parent contents) or delete_all (remove subtree)
    """

    def __init__(self, categories: CategoryRepository, texts: TextRepository):
        self.categories = categories
        self.texts = texts

    def get_owned(self, principal: AuthContext, category_id: int) -> Category:
        category = self.categories.get_owned(category_id, principal.user_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    def list_children(self, principal: AuthContext, parent_id: Optional[int] = None) -> List[Category]:
        if parent_id is not None:
            self.get_owned(principal, parent_id)
        return self.categories.get_categories(principal.user_id, parent_id)

    def list_flat(self, principal: AuthContext) -> List[dict]:
        return self.categories.get_categories_flat(principal.user_id)

    def create(self, principal: AuthContext, data: CategoryCreate) -> Category:
        name = _clean_name(data.name)
        if data.parent_id is not None:
            self.get_owned(principal, data.parent_id)
        category = self.categories.create(principal.user_id, name, data.parent_id)
        logger.info(
            "Folder created",
            extra={"category_id": category.id, "user_id": principal.user_id, "parent_id": data.parent_id},
        )
        return category

    def update(self, principal: AuthContext, category_id: int, data: CategoryUpdate) -> Category:
        category = self.get_owned(principal, category_id)

        if data.name is not None:
            category.name = _clean_name(data.name)

        if data.move_to_root:
            category.parent_id = None
        elif data.parent_id is not None and data.parent_id != category.parent_id:
            self.get_owned(principal, data.parent_id)
            if data.parent_id == category.id or data.parent_id in self.categories.get_descendant_ids(category.id):
                raise CircularCategoryError(category.id, data.parent_id)
            category.parent_id = data.parent_id

        try:
            self.categories.db.commit()
        except SQLAlchemyError as e:
            self.categories.db.rollback()
            raise DatabaseError("Failed to update folder.", e)
        self.categories.db.refresh(category)
        return category

    def delete(self, principal: AuthContext, category_id: int, action: str = "move_up") -> CategoryDeleteResponse:
        """Delete a folder.

        action='move_up'    -- child folders and texts move to the deleted folder's parent.
        action='delete_all' -- the folder, every folder below it and all their texts are removed.
        """
        if action not in DELETE_ACTIONS:
            raise ValidationError(f"Unknown delete action: {action}", field="action")

        category = self.get_owned(principal, category_id)
        parent_id = category.parent_id
        db = self.categories.db

        try:
            if action == "delete_all":
                subtree = [category.id] + self.categories.get_descendant_ids(category.id)
                affected = self.texts.delete_in_categories(principal.user_id, subtree)
                # parent_id cascades, so the rowcount only sees the top folder.
                deleted = len(subtree) if self.categories.delete_ids(subtree) else 0
            else:
                self.categories.reparent_children(category.id, parent_id)
                affected = self.texts.move_texts(principal.user_id, [category.id], parent_id)
                deleted = self.categories.delete_ids([category.id])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to delete folder", extra={"category_id": category_id, "error": str(e)})
            raise DatabaseError("Failed to delete folder.", e)

        logger.info(
            "Folder deleted",
            extra={"category_id": category_id, "action": action, "affected_texts": affected},
        )
        return CategoryDeleteResponse(deleted_categories=deleted, affected_texts=affected, action=action)
