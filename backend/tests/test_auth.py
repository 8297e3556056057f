"""Tests for registration, login, the session cookie, and token handling."""

from datetime import datetime, timezone

import pytest

from typecraft.core.config import settings
from typecraft.core.token_factory import create_token, decode_token
from typecraft.models import User

from conftest import make_text


class TestTokenFactory:
    """Unit tests for token creation and decoding, no HTTP."""

    def test_round_trip(self):
        token = create_token(7, "alice", "secret")
        payload = decode_token(token, "secret")
        assert payload.sub == "7"
        assert payload.username == "alice"
        assert payload.exp > datetime.now(timezone.utc)

    def test_wrong_secret(self):
        assert decode_token(create_token(7, "alice", "secret"), "other") is None

    def test_expired(self):
        assert decode_token(create_token(7, "alice", "secret", expires_hours=-1), "secret") is None

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c"])
    def test_garbage(self, garbage):
        assert decode_token(garbage, "secret") is None


class TestRegister:

    def test_register(self, client, db):
        resp = client.post("/register", json={"username": "typist", "password": "securepass"})
        assert resp.status_code == 201
        assert resp.json()["username"] == "typist"

        user = db.query(User).filter(User.username == "typist").one()
        assert user.password_hash != "securepass"
        assert user.password_hash.startswith("$2")

    def test_duplicate_username(self, client, alice):
        resp = client.post("/register", json={"username": "alice", "password": "securepass"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username already taken"

    @pytest.mark.parametrize("body", [
        {"username": "ab", "password": "securepass"},
        {"username": "x" * 51, "password": "securepass"},
        {"username": "typist", "password": "short"},
        {},
    ])
    def test_invalid_input(self, client, body):
        resp = client.post("/register", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"


class TestLogin:

    def test_login_returns_token_and_sets_cookie(self, client, alice):
        resp = client.post("/login", json={"username": "alice", "password": "correct-horse"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["username"] == "alice"
        assert decode_token(body["token"], settings.secret_key).username == "alice"

        cookie = resp.headers["set-cookie"]
        assert cookie.startswith(f"{settings.session_cookie_name}=")
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()

    def test_cookie_authenticates_later_requests(self, client, db, alice):
        make_text(db, alice, "Mine")
        client.post("/login", json={"username": "alice", "password": "correct-horse"})
        resp = client.get("/texts")
        assert resp.status_code == 200
        assert [t["title"] for t in resp.json()["texts"]] == ["Mine"]

    def test_logout_clears_cookie(self, client, alice):
        client.post("/login", json={"username": "alice", "password": "correct-horse"})
        assert client.post("/logout").status_code == 200
        assert client.get("/texts").status_code == 401

    @pytest.mark.parametrize("username,password", [
        ("alice", "wrong-password"),
        ("nobody", "correct-horse"),
        ("", ""),
    ])
    def test_bad_credentials(self, client, alice, username, password):
        resp = client.post("/login", json={"username": username, "password": password})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid username or password."


class TestTokens:

    def test_bearer_header_wins_over_cookie(self, client, alice, bob, bob_headers):
        client.post("/login", json={"username": "alice", "password": "correct-horse"})
        profile = client.get("/profile", headers=bob_headers).json()
        assert profile["user"]["username"] == "bob"

    def test_token_signed_with_other_secret(self, client, alice):
        token = create_token(alice.id, alice.username, "not-the-server-secret")
        resp = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_token_for_deleted_user(self, client, db, alice, alice_headers):
        db.delete(alice)
        db.commit()
        assert client.get("/profile", headers=alice_headers).status_code == 401

    def test_expired_token(self, client, alice):
        token = create_token(alice.id, alice.username, settings.secret_key, expires_hours=-1)
        resp = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestProfile:

    def test_profile_stats(self, client, db, alice, alice_headers):
        make_text(db, alice, "One", "Hello.", progress_index=2)
        make_text(db, alice, "Two")
        resp = client.get("/profile?message=Welcome", headers=alice_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["username"] == "alice"
        assert body["message"] == "Welcome"
        assert body["stats"] == {
            "text_count": 2,
            "category_count": 0,
            "texts_in_progress": 1,
            "characters_typed": 2,
        }
