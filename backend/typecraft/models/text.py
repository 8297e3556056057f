"""Text model."""

from sqlalchemy import Column, Index, Integer, String, Text as TextColumn, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Text(Base):
    """A practice text owned by exactly one user.

    ``category_id`` NULL means the text lives at the root. Deleting a
    category sets it back to NULL unless the whole subtree is removed.
    """

    __tablename__ = "texts"
    __table_args__ = (
        Index("ix_texts_user_id", "user_id"),
        Index("ix_texts_user_category", "user_id", "category_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    content = Column(TextColumn, nullable=False)

    # Position of the next character to type, 0..len(content)
    progress_index = Column(Integer, nullable=False, default=0)
    # Manual ordering within a folder
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="texts")
    category = relationship("Category", back_populates="texts")
