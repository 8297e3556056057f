"""Base repository with shared get-by-ID patterns.

Subclasses specify model_class and not_found_error; the base provides the
common lookups. ``get_owned`` scopes a lookup to one user so callers never
see rows that belong to somebody else.
"""

from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import TypecraftException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Text)
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    not_found_error: Type[TypecraftException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def get_by_id(self, entity_id: int) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: int) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        return self._base_query().filter(self.model_class.id == entity_id).first()

    def get_owned(self, entity_id: int, user_id: int) -> Optional[ModelT]:
        """Get entity by primary key only if *user_id* owns it."""
        return (
            self._base_query()
            .filter(self.model_class.id == entity_id, self.model_class.user_id == user_id)
            .first()
        )
