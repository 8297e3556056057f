"""Authentication service: registration, credential checks, profile stats.

All password operations use bcrypt via passlib. Passwords are never stored
or logged in plaintext. Endpoints are thin wrappers around these functions.
"""

import logging
from typing import Optional

from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import ValidationError, AuthenticationError
from ..models.user import User
from ..repositories.category_repository import CategoryRepository
from ..repositories.text_repository import TextRepository

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 8


def register_user(db: Session, username: str, password: str) -> User:
    """Create a new user account.

    Raises ValidationError if the username is taken or inputs are invalid.
    """
    username = (username or "").strip()
    if not MIN_USERNAME_LENGTH <= len(username) <= MAX_USERNAME_LENGTH:
        raise ValidationError(
            f"Username must be between {MIN_USERNAME_LENGTH} and {MAX_USERNAME_LENGTH} characters",
            field="username",
        )
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )

    if get_user_by_username(db, username) is not None:
        raise ValidationError("Username already taken", field="username")

    user = User(username=username, password_hash=bcrypt.hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same name.
        db.rollback()
        raise ValidationError("Username already taken", field="username")
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """Validate credentials and return the user.

    Raises AuthenticationError on unknown username or wrong password.
    """
    user = get_user_by_username(db, (username or "").strip())

    if user is None or not bcrypt.verify(password or "", user.password_hash):
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid username or password.")

    return user


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_profile_stats(db: Session, user_id: int) -> dict:
    stats = TextRepository(db).get_stats(user_id)
    stats["category_count"] = CategoryRepository(db).count_for_user(user_id)
    return stats
