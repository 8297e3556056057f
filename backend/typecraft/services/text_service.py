"""Text service: everything done to texts after they exist.

Browsing a folder, editing, deleting, reordering, and saving practice
progress. Creation lives in ``submission_workflow``; ownership checks
happen before these methods are called (``OwnershipGuard``), except where
a method takes a raw id from the request body and guards it itself.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.auth import AuthContext
from ..exceptions import DatabaseError, ValidationError
from ..models.text import Text
from ..repositories.category_repository import CategoryRepository
from ..repositories.text_repository import TextRepository
from .ownership_guard import OwnershipGuard
from .submission_workflow import CategoryRef, resolve_category_id
from .text_normalizer import normalize

logger = logging.getLogger(__name__)


def parse_folder_id(value: Any) -> Optional[int]:
    """Lenient folder id from a query string: anything non-integer is root."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class TextService:

    def __init__(
        self,
        texts: TextRepository,
        categories: CategoryRepository,
        strict_category_ids: bool = False,
    ):
        self.texts = texts
        self.categories = categories
        self.strict_category_ids = strict_category_ids
        self.guard = OwnershipGuard(texts)

    # --- Browsing ---

    def browse(self, principal: AuthContext, category_id: Any = None) -> dict:
        """Contents of one folder plus what the page around it needs.

        An unparsable or foreign folder id shows the root.
        """
        current_id = parse_folder_id(category_id)
        current = None
        if current_id is not None:
            current = self.categories.get_owned(current_id, principal.user_id)
            if current is None:
                current_id = None

        return {
            "current_category_id": current_id,
            "texts": self.texts.get_texts(principal.user_id, current_id),
            "categories": self.categories.get_categories(principal.user_id, current_id),
            "breadcrumbs": self.breadcrumbs(current) if current is not None else [],
            "all_categories_flat": self.categories.get_categories_flat(principal.user_id),
        }

    def breadcrumbs(self, category) -> List[dict]:
        return [{"id": c.id, "name": c.name} for c in self.categories.get_ancestors(category)]

    def flat_categories(self, principal: AuthContext) -> List[dict]:
        """Folder list for dropdowns. An empty list if it cannot be loaded."""
        try:
            return self.categories.get_categories_flat(principal.user_id)
        except SQLAlchemyError:
            logger.exception("Could not load folder list", extra={"user_id": principal.user_id})
            return []

    def new_text_context(self, principal: AuthContext, folder_id: Any = None) -> dict:
        return {
            "categories": self.flat_categories(principal),
            "selected_folder_id": parse_folder_id(folder_id),
        }

    # --- Editing ---

    def edit(
        self,
        principal: AuthContext,
        text: Text,
        title: Optional[str],
        content: Optional[str],
        category_id: CategoryRef = None,
    ) -> Optional[int]:
        """Update an owned text. Returns the folder the text now lives in.

        Raises:
            ValidationError: empty title or content, or (strict mode) a bad folder.
            DatabaseError: the update was not stored.
        """
        title = (title or "").strip()
        content = normalize(content or "")
        if not title or not content:
            raise ValidationError("Title and content cannot be empty.")

        target = resolve_category_id(
            self.categories, principal.user_id, category_id, strict=self.strict_category_ids
        )

        if not self.texts.update_text(text.id, title, content, target):
            raise DatabaseError("Failed to update text. Please try again.")

        logger.info("Text updated", extra={"text_id": text.id, "user_id": principal.user_id})
        return target

    def delete(self, text: Text) -> bool:
        """Delete an owned text. False when it was already gone.

        Raises:
            DatabaseError: the database refused the delete.
        """
        # The commit inside delete_text expires *text*; read what we log first.
        text_id, user_id = text.id, text.user_id
        try:
            deleted = self.texts.delete_text(text_id)
        except SQLAlchemyError as e:
            logger.error("Failed to delete text", extra={"text_id": text_id, "error": str(e)})
            raise DatabaseError("An error occurred while deleting the text.", e)

        if deleted:
            logger.info("Text deleted", extra={"text_id": text_id, "user_id": user_id})
        return deleted

    # --- Ordering ---

    def reorder(self, principal: AuthContext, order: Any) -> None:
        """Apply a drag-and-drop order. Ids the user does not own are ignored.

        Raises:
            ValidationError: *order* is not a list of integers.
            DatabaseError: the new order was not stored.
        """
        if not isinstance(order, list):
            raise ValidationError("Invalid data format.", field="order")
        try:
            ids = [int(item) for item in order]
        except (TypeError, ValueError):
            raise ValidationError("Invalid data format.", field="order")

        if not self.texts.update_text_order(principal.user_id, ids):
            raise DatabaseError("Database error updating order.")
        logger.info("Text order updated", extra={"user_id": principal.user_id, "count": len(ids)})

    # --- Practice progress ---

    def save_progress(self, principal: AuthContext, text_id: Any, progress_index: Any) -> None:
        """Store the typist's position in a text.

        Raises:
            ValidationError: missing or invalid values.
            AuthenticationError / TextNotFoundError / ForbiddenError: from the guard.
            DatabaseError: the position was not stored.
        """
        if text_id is None or progress_index is None or text_id == "" or progress_index == "":
            raise ValidationError("Missing required data.")

        if isinstance(text_id, (bool, float)) or isinstance(progress_index, (bool, float)):
            raise ValidationError("Invalid data.")
        try:
            text_id = int(text_id)
            progress_index = int(progress_index)
        except (TypeError, ValueError):
            raise ValidationError("Invalid data.")
        if progress_index < 0:
            raise ValidationError("Invalid data.", field="progress_index")

        text = self.guard.authorize(principal, text_id)
        if progress_index > len(text.content):
            raise ValidationError("Invalid data.", field="progress_index")

        try:
            saved = self.texts.save_progress(text_id, progress_index)
        except SQLAlchemyError as e:
            logger.error("Failed to save progress", extra={"text_id": text_id, "error": str(e)})
            raise DatabaseError("Server error saving progress.", e)

        if not saved:
            raise DatabaseError("Database error saving progress.")
