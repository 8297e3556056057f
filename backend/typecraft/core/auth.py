"""Authentication module: FastAPI dependencies that resolve the principal.

Public interface:
    ``require_auth``  - returns AuthContext or raises 401.
    ``optional_auth`` - returns AuthContext or None, never raises.

The token is read from the ``Authorization: Bearer`` header first, then
from the session cookie set at login.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import TokenPayload, decode_token
from ..database import get_db
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated user a request acts for."""

    user_id: int
    username: str


def _read_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name) or None


def _resolve(token: Optional[str], db: Session) -> Optional[AuthContext]:
    if not token:
        return None
    payload = decode_token(token, settings.secret_key)
    if payload is None:
        return None
    return _load_auth_context(payload, db)


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Require a valid login token and return the user's AuthContext."""
    token = _read_token(request, credentials)
    if token is None:
        raise AuthenticationError()

    auth = _resolve(token, db)
    if auth is None:
        logger.info("Rejected invalid or expired token", extra={"path": request.url.path})
        raise AuthenticationError()
    return auth


def optional_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[AuthContext]:
    """Validate a token if present. Returns None instead of raising."""
    return _resolve(_read_token(request, credentials), db)


def _load_auth_context(payload: TokenPayload, db: Session) -> Optional[AuthContext]:
    """Confirm the token's user still exists."""
    from ..models.user import User

    try:
        user = db.query(User).filter(User.id == payload.user_id).first()
    except ValueError:
        return None
    if user is None:
        return None

    return AuthContext(user_id=user.id, username=user.username)
