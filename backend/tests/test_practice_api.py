"""Integration tests for the practice page and progress saving."""

import pytest

from typecraft.models import Text

from conftest import make_text


def _progress(db, text_id):
    db.expire_all()
    return db.query(Text.progress_index).filter(Text.id == text_id).scalar()


class TestPracticePage:

    def test_owner_loads_text_and_progress(self, client, db, alice, alice_headers):
        text = make_text(db, alice, "Drill", "The quick brown fox.", progress_index=3)
        resp = client.get(f"/practice/{text.id}", headers=alice_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"] == {"id": alice.id, "username": "alice"}
        assert body["text"]["content"] == "The quick brown fox."
        assert body["text"]["progress_index"] == 3

    def test_other_user_is_forbidden(self, client, db, alice, bob_headers):
        text = make_text(db, alice)
        assert client.get(f"/practice/{text.id}", headers=bob_headers).status_code == 403


class TestSaveProgress:

    def test_saves_position(self, client, db, alice, alice_headers):
        text = make_text(db, alice, content="Hello world.")
        resp = client.post(
            "/practice/progress",
            json={"text_id": text.id, "progress_index": 5},
            headers=alice_headers,
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert _progress(db, text.id) == 5

    def test_numeric_strings_are_accepted(self, client, db, alice, alice_headers):
        text = make_text(db, alice, content="Hello world.")
        resp = client.post(
            "/practice/progress",
            json={"text_id": str(text.id), "progress_index": "12"},
            headers=alice_headers,
        )
        assert resp.status_code == 200
        assert _progress(db, text.id) == 12

    @pytest.mark.parametrize("payload", [
        {},
        {"text_id": 1},
        {"progress_index": 3},
    ])
    def test_missing_data(self, client, alice_headers, payload):
        resp = client.post("/practice/progress", json=payload, headers=alice_headers)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Missing required data."}

    @pytest.mark.parametrize("progress_index", ["abc", -1, 1.5, True, 999])
    def test_invalid_data(self, client, db, alice, alice_headers, progress_index):
        text = make_text(db, alice, content="Short.", progress_index=2)
        resp = client.post(
            "/practice/progress",
            json={"text_id": text.id, "progress_index": progress_index},
            headers=alice_headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Invalid data."}
        assert _progress(db, text.id) == 2

    def test_other_users_text(self, client, db, alice, bob_headers):
        text = make_text(db, alice, content="Hello world.")
        resp = client.post(
            "/practice/progress",
            json={"text_id": text.id, "progress_index": 1},
            headers=bob_headers,
        )
        assert resp.status_code == 403
        assert resp.json()["success"] is False
        assert _progress(db, text.id) == 0

    def test_unknown_text(self, client, alice_headers):
        resp = client.post(
            "/practice/progress",
            json={"text_id": 987654, "progress_index": 1},
            headers=alice_headers,
        )
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Text not found."}

    def test_requires_login(self, client):
        resp = client.post("/practice/progress", json={"text_id": 1, "progress_index": 1})
        assert resp.status_code == 401

    def test_progress_shows_in_profile_stats(self, client, db, alice, alice_headers):
        text = make_text(db, alice, content="Hello world.")
        make_text(db, alice, "Untouched")
        client.post(
            "/practice/progress",
            json={"text_id": text.id, "progress_index": 6},
            headers=alice_headers,
        )
        stats = client.get("/profile", headers=alice_headers).json()["stats"]
        assert stats["text_count"] == 2
        assert stats["texts_in_progress"] == 1
        assert stats["characters_typed"] == 6
