"""Unit tests for OwnershipGuard."""

from types import SimpleNamespace

import pytest

from typecraft.core.auth import AuthContext
from typecraft.exceptions import AuthenticationError, ForbiddenError, TextNotFoundError
from typecraft.services.ownership_guard import OwnershipGuard


class FakeTexts:
    def __init__(self, *texts):
        self.by_id = {t.id: t for t in texts}
        self.lookups = 0

    def get_text(self, text_id):
        self.lookups += 1
        return self.by_id.get(text_id)


OWNED = SimpleNamespace(id=1, user_id=10, content="abc")
FOREIGN = SimpleNamespace(id=2, user_id=20, content="xyz")


class TestAuthorize:

    def test_owner_gets_the_text(self):
        guard = OwnershipGuard(FakeTexts(OWNED, FOREIGN))
        assert guard.authorize(AuthContext(10, "alice"), 1) is OWNED

    def test_anonymous_is_rejected_before_lookup(self):
        texts = FakeTexts(OWNED)
        with pytest.raises(AuthenticationError):
            OwnershipGuard(texts).authorize(None, 1)
        assert texts.lookups == 0

    def test_missing_text(self):
        with pytest.raises(TextNotFoundError) as exc_info:
            OwnershipGuard(FakeTexts()).authorize(AuthContext(10, "alice"), 99)
        assert exc_info.value.status_code == 404

    def test_other_users_text(self):
        with pytest.raises(ForbiddenError) as exc_info:
            OwnershipGuard(FakeTexts(OWNED, FOREIGN)).authorize(AuthContext(10, "alice"), 2)
        assert exc_info.value.status_code == 403

    def test_text_is_read_on_every_call(self):
        texts = FakeTexts(OWNED)
        guard = OwnershipGuard(texts)
        guard.authorize(AuthContext(10, "alice"), 1)
        guard.authorize(AuthContext(10, "alice"), 1)
        assert texts.lookups == 2
