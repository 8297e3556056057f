"""Repository for text database operations.

Write methods report failure through their return value (``None`` or
``False``) rather than raising: the caller decides which message the user
sees, and the database cause is logged here.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..exceptions import TextNotFoundError
from ..models.text import Text

logger = logging.getLogger(__name__)


def _in_folder(category_id: Optional[int]):
    """Filter clause for texts filed directly under *category_id*."""
    if category_id is None:
        return Text.category_id.is_(None)
    return Text.category_id == category_id


class TextRepository(BaseRepository[Text]):
    """Data access layer for texts."""

    model_class = Text
    not_found_error = TextNotFoundError

    def __init__(self, db: Session):
        super().__init__(db)

    def add_text(
        self,
        user_id: int,
        title: str,
        content: str,
        category_id: Optional[int] = None,
    ) -> Optional[int]:
        """Insert a text at the end of its folder.

        Returns:
            The new text id, or ``None`` if the database rejected the write.
        """
        try:
            next_order = (
                self.db.query(func.coalesce(func.max(Text.order_index), -1))
                .filter(Text.user_id == user_id, _in_folder(category_id))
                .scalar()
            ) + 1
            text = Text(
                user_id=user_id,
                title=title,
                content=content,
                category_id=category_id,
                progress_index=0,
                order_index=next_order,
            )
            self.db.add(text)
            self.db.commit()
            self.db.refresh(text)
            return text.id
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to insert text", extra={"user_id": user_id, "error": str(e)})
            return None

    def get_text(self, text_id: int) -> Optional[Text]:
        return self.get_by_id_optional(text_id)

    def get_texts(self, user_id: int, category_id: Optional[int] = None) -> List[Text]:
        """Texts directly inside *category_id* (root when None), in display order."""
        return (
            self.db.query(Text)
            .filter(Text.user_id == user_id, _in_folder(category_id))
            .order_by(Text.order_index, Text.id)
            .all()
        )

    def update_text(
        self,
        text_id: int,
        title: str,
        content: str,
        category_id: Optional[int] = None,
    ) -> bool:
        """Overwrite title, content and folder. Progress restarts at zero
        when the content changed, since the old index no longer lines up."""
        try:
            text = self.get_by_id_optional(text_id)
            if text is None:
                return False
            if text.content != content:
                text.progress_index = 0
            text.title = title
            text.content = content
            text.category_id = category_id
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to update text", extra={"text_id": text_id, "error": str(e)})
            return False

    def delete_text(self, text_id: int) -> bool:
        """Delete a text. Returns False when nothing was deleted.

        Raises:
            SQLAlchemyError: on database failure, so the caller can tell
            "already gone" apart from "could not delete".
        """
        try:
            deleted = self.db.query(Text).filter(Text.id == text_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return deleted > 0

    def save_progress(self, text_id: int, progress_index: int) -> bool:
        """Store the typist's position.

        Raises:
            SQLAlchemyError: on database failure.
        """
        try:
            updated = (
                self.db.query(Text)
                .filter(Text.id == text_id)
                .update({Text.progress_index: progress_index}, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return updated > 0

    def update_text_order(self, user_id: int, ordered_ids: Sequence[int]) -> bool:
        """Set ``order_index`` to each id's position in *ordered_ids*.

        Ids that do not belong to *user_id* are skipped. The whole update is
        one transaction.
        """
        try:
            owned = {
                t.id: t
                for t in self.db.query(Text).filter(
                    Text.user_id == user_id, Text.id.in_(list(ordered_ids))
                )
            }
            for position, text_id in enumerate(ordered_ids):
                text = owned.get(text_id)
                if text is not None:
                    text.order_index = position
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to reorder texts", extra={"user_id": user_id, "error": str(e)})
            return False

    def move_texts(self, user_id: int, from_category_ids: Sequence[Optional[int]],
                   to_category_id: Optional[int]) -> int:
        """Re-file every text in *from_category_ids* under *to_category_id*. No commit."""
        return (
            self.db.query(Text)
            .filter(Text.user_id == user_id, Text.category_id.in_(list(from_category_ids)))
            .update({Text.category_id: to_category_id}, synchronize_session=False)
        )

    def delete_in_categories(self, user_id: int, category_ids: Sequence[int]) -> int:
        """Delete every text filed under *category_ids*. No commit."""
        return (
            self.db.query(Text)
            .filter(Text.user_id == user_id, Text.category_id.in_(list(category_ids)))
            .delete(synchronize_session=False)
        )

    def get_stats(self, user_id: int) -> dict:
        """Counts shown on the profile page."""
        base = self.db.query(Text).filter(Text.user_id == user_id)
        return {
            "text_count": base.count(),
            "texts_in_progress": base.filter(Text.progress_index > 0).count(),
            "characters_typed": (
                self.db.query(func.coalesce(func.sum(Text.progress_index), 0))
                .filter(Text.user_id == user_id)
                .scalar()
            ),
        }

    def count(self) -> int:
        return self.db.query(func.count(Text.id)).scalar()
