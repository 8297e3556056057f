"""Ownership guard: a text may only be touched by the user who owns it.

Every per-text operation (view, edit, delete, practice, progress,
summarize) goes through ``OwnershipGuard.authorize``. The text is read
fresh on each call; nothing is cached between requests.
"""

import logging
from typing import Optional

from ..core.auth import AuthContext
from ..exceptions import AuthenticationError, ForbiddenError, TextNotFoundError
from ..models.text import Text
from ..repositories.text_repository import TextRepository

logger = logging.getLogger(__name__)


class OwnershipGuard:

    def __init__(self, texts: TextRepository):
        self.texts = texts

    def authorize(self, principal: Optional[AuthContext], text_id: int) -> Text:
        """Return the text if *principal* owns it.

        Raises:
            AuthenticationError: no principal.
            TextNotFoundError: no text with that id.
            ForbiddenError: the text belongs to another user.
        """
        if principal is None:
            raise AuthenticationError()

        text = self.texts.get_text(text_id)
        if text is None:
            raise TextNotFoundError(text_id)

        if text.user_id != principal.user_id:
            logger.warning(
                "Ownership check failed",
                extra={"text_id": text_id, "user_id": principal.user_id},
            )
            raise ForbiddenError()

        return text
