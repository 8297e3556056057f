"""Signed login tokens: create on login, decode on every authenticated request.

The same string is returned to API clients and stored in the session
cookie for browsers. Format is a compact HS256 JWT with ``sub`` (user id),
``username``, ``iat``, ``exp`` and ``iss`` claims.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

ISSUER = "typecraft"

_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True)
class TokenPayload:
    sub: str
    username: str
    exp: datetime

    @property
    def user_id(self) -> int:
        return int(self.sub)


def create_token(
    user_id: int,
    username: str,
    secret: str,
    expires_hours: int = 24 * 7,
) -> str:
    """Sign a token for *user_id* valid for *expires_hours*."""
    issued = int(time.time())
    claims = {
        "sub": str(user_id),
        "username": username,
        "iat": issued,
        "exp": issued + expires_hours * 3600,
        "iss": ISSUER,
    }
    head_and_body = _segment(_HEADER) + b"." + _segment(claims)
    return (head_and_body + b"." + _b64encode(_sign(head_and_body, secret))).decode()


def decode_token(token: str, secret: str) -> Optional[TokenPayload]:
    """Return the payload of a valid token, or ``None``.

    Invalid means: malformed, bad signature, another issuer, or expired.
    """
    try:
        head_and_body, _, signature = token.encode().rpartition(b".")
        if head_and_body.count(b".") != 1:
            return None
        if not hmac.compare_digest(_sign(head_and_body, secret), _b64decode(signature)):
            return None

        claims = json.loads(_b64decode(head_and_body.split(b".")[1]))
        if claims.get("iss") != ISSUER or time.time() > claims.get("exp", 0):
            return None

        return TokenPayload(
            sub=claims.get("sub", ""),
            username=claims.get("username", ""),
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
    except (ValueError, KeyError, TypeError, UnicodeError):
        # json.JSONDecodeError and binascii.Error are ValueErrors
        return None


def _sign(data: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), data, hashlib.sha256).digest()


def _segment(obj: dict) -> bytes:
    return _b64encode(json.dumps(obj, separators=(",", ":")).encode())


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
