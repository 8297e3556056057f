"""Repository for category (folder) database operations."""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .base import BaseRepository
from ..exceptions import CategoryNotFoundError
from ..models.category import Category


class CategoryRepository(BaseRepository[Category]):
    """CRUD for a user's folder tree. Every query is scoped to one user."""

    model_class = Category
    not_found_error = CategoryNotFoundError

    def __init__(self, db: Session):
        super().__init__(db)

    def create(self, user_id: int, name: str, parent_id: Optional[int] = None) -> Category:
        category = Category(user_id=user_id, name=name, parent_id=parent_id)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def get_categories(self, user_id: int, parent_id: Optional[int] = None) -> List[Category]:
        """Direct children of *parent_id* (top level when None), by name."""
        query = self.db.query(Category).filter(Category.user_id == user_id)
        if parent_id is None:
            query = query.filter(Category.parent_id.is_(None))
        else:
            query = query.filter(Category.parent_id == parent_id)
        return query.order_by(Category.name, Category.id).all()

    def get_all(self, user_id: int) -> List[Category]:
        return (
            self.db.query(Category)
            .filter(Category.user_id == user_id)
            .order_by(Category.name, Category.id)
            .all()
        )

    def get_categories_flat(self, user_id: int) -> List[dict]:
        """Depth-first listing of the whole tree for dropdown menus.

        Each entry carries ``depth`` (0 for top level) and ``path``, the
        names from the top joined with " / ".
        """
        children: Dict[Optional[int], List[Category]] = {}
        for category in self.get_all(user_id):
            children.setdefault(category.parent_id, []).append(category)

        flat: List[dict] = []

        def walk(parent_id: Optional[int], depth: int, prefix: str) -> None:
            for category in children.get(parent_id, []):
                path = f"{prefix} / {category.name}" if prefix else category.name
                flat.append({
                    "id": category.id,
                    "name": category.name,
                    "parent_id": category.parent_id,
                    "depth": depth,
                    "path": path,
                })
                walk(category.id, depth + 1, path)

        walk(None, 0, "")
        return flat

    def get_ancestors(self, category: Category) -> List[Category]:
        """Chain from the top-level folder down to *category* inclusive."""
        chain = [category]
        seen = {category.id}
        current = category
        while current.parent_id is not None and current.parent_id not in seen:
            parent = self.get_by_id_optional(current.parent_id)
            if parent is None:
                break
            chain.append(parent)
            seen.add(parent.id)
            current = parent
        chain.reverse()
        return chain

    def get_descendant_ids(self, category_id: int) -> List[int]:
        """Ids of every folder below *category_id* (not including it)."""
        result: List[int] = []
        frontier = [category_id]
        while frontier:
            rows = (
                self.db.query(Category.id)
                .filter(Category.parent_id.in_(frontier))
                .all()
            )
            frontier = [row[0] for row in rows if row[0] not in result]
            result.extend(frontier)
        return result

    def reparent_children(self, category_id: int, new_parent_id: Optional[int]) -> int:
        """Move the direct children of *category_id* under *new_parent_id*. No commit."""
        return (
            self.db.query(Category)
            .filter(Category.parent_id == category_id)
            .update({Category.parent_id: new_parent_id}, synchronize_session=False)
        )

    def delete_ids(self, category_ids: List[int]) -> int:
        """Delete the given folders. No commit."""
        return (
            self.db.query(Category)
            .filter(Category.id.in_(category_ids))
            .delete(synchronize_session=False)
        )

    def count_for_user(self, user_id: int) -> int:
        return self.db.query(Category).filter(Category.user_id == user_id).count()
