"""Tests for /health and / endpoints."""

from unittest.mock import patch

from conftest import make_text


class TestHealth:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["db"] == "ok"
        assert "uptime_seconds" in data
        assert data["version"] == "1.0.0"
        assert data["pdftotext"] in ("available", "missing")

    def test_health_counts_texts(self, client, db, alice, bob):
        make_text(db, alice)
        make_text(db, bob)
        assert client.get("/health").json()["text_count"] == 2

    def test_health_reports_missing_pdftotext(self, client):
        with patch("typecraft.main.shutil.which", return_value=None):
            assert client.get("/health").json()["pdftotext"] == "missing"

    def test_root_returns_api_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Typecraft API"


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/health")
        assert "x-request-id" in resp.headers
        assert resp.headers["x-response-time"].endswith("ms")

    def test_client_request_id_is_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert resp.headers["x-request-id"] == "trace-123"
