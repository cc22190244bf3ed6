"""HTTP surface tests using the Flask test client."""
from __future__ import annotations

import json

from vera.errors import StoreError
from vera.extensions import get_stats


class TestCoreEndpoints:
    def test_index_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.get_json()
        assert data["message"] == "vera-back is running"
        assert "/api/stats/stream (GET - SSE)" in data["endpoints"]

    def test_health(self, client):
        data = client.get("/health").get_json()

        assert data["status"] == "ok"
        assert data["environment"]
        assert data["time"].endswith("Z")

    def test_echo_returns_body(self, client):
        response = client.post("/echo", json={"hello": "world"})
        assert response.get_json() == {"received": {"hello": "world"}}

    def test_echo_without_body(self, client):
        assert client.post("/echo").get_json() == {"received": None}

    def test_supabase_check_configured(self, client):
        data = client.get("/supabase-check").get_json()

        assert data["configured"] is True
        assert data["source"] == "env"
        assert "no network call" in data["message"]

    def test_supabase_check_unconfigured(self, unconfigured_client):
        data = unconfigured_client.get("/supabase-check").get_json()

        assert data["configured"] is False
        assert "SUPABASE_URL" in data["message"]

    def test_api_404_is_json(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.get_json()["error"] == "not found"


class TestAuthEndpoints:
    def test_register_success(self, client):
        response = client.post("/api/auth/register", json={"email": "a@b.c", "password": "pw"})

        assert response.status_code == 201
        data = response.get_json()
        assert data["user"]["email"] == "a@b.c"
        assert "Sign-up successful" in data["message"]

    def test_register_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "a@b.c"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Email and password are required."

    def test_register_store_error(self, client, fake_store):
        fake_store.auth_error = StoreError("User already registered")
        response = client.post("/api/auth/register", json={"email": "a@b.c", "password": "pw"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "User already registered"

    def test_register_unconfigured(self, unconfigured_client):
        response = unconfigured_client.post("/api/auth/register", json={"email": "a", "password": "b"})

        assert response.status_code == 500
        assert response.get_json()["error"] == "Supabase client not configured."

    def test_login_success(self, client):
        response = client.post("/api/auth/login", json={"email": "a@b.c", "password": "pw"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["message"] == "Login successful"
        assert data["session"]["access_token"] == "token-1"

    def test_login_missing_body(self, client):
        response = client.post("/api/auth/login", data="not json")
        assert response.status_code == 400

    def test_login_store_error_is_401(self, client, fake_store):
        fake_store.auth_error = StoreError("Invalid login credentials")
        response = client.post("/api/auth/login", json={"email": "a@b.c", "password": "bad"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid login credentials"

    def test_login_unconfigured(self, unconfigured_client):
        response = unconfigured_client.post("/api/auth/login", json={"email": "a", "password": "b"})
        assert response.status_code == 500


class TestStatsEndpoints:
    def test_overview(self, client, sample_rows):
        response = client.get("/api/stats/overview")

        assert response.status_code == 200
        data = response.get_json()
        assert data["totalResponses"] == len(sample_rows)
        assert len(data["dailyCounts"]) == 7
        assert data["scales"]["satisfaction_vera"] == {"avg": 4.5, "min": 4, "max": 5}

    def test_overview_fetch_failure(self, client, fake_store):
        fake_store.fetch_error = StoreError("Failed to fetch rows: relation does not exist")
        response = client.get("/api/stats/overview")

        assert response.status_code == 500
        assert "relation does not exist" in response.get_json()["error"]

    def test_overview_unexpected_error_stays_json(self, client, fake_store):
        def _explode(columns):
            raise RuntimeError("unexpected payload")

        fake_store.fetch_rows = _explode
        response = client.get("/api/stats/overview")

        assert response.status_code == 500
        assert response.is_json
        assert response.get_json() == {"error": "Failed to compute stats."}

    def test_overview_unconfigured(self, unconfigured_client):
        response = unconfigured_client.get("/api/stats/overview")

        assert response.status_code == 500
        assert response.get_json()["error"] == "Supabase client not configured."

    def test_stream_unconfigured(self, unconfigured_client):
        response = unconfigured_client.get("/api/stats/stream")
        assert response.status_code == 500

    def test_stream_sends_cached_snapshot_then_unsubscribes(self, app, client):
        client.get("/api/stats/overview")  # primes the cache

        response = client.get("/api/stats/stream", buffered=False)
        assert response.status_code == 200
        assert response.mimetype == "text/event-stream"
        assert response.headers["Cache-Control"] == "no-cache"
        assert response.headers["Connection"] == "keep-alive"

        first = next(iter(response.response))
        assert first.startswith(b"data: ")
        assert first.endswith(b"\n\n")
        payload = json.loads(first[len(b"data: "):].decode("utf-8"))
        assert payload["totalResponses"] == 3

        with app.app_context():
            stats = get_stats()
            assert stats.hub.subscriber_count == 1
            response.close()
            assert stats.hub.subscriber_count == 0

    def test_stream_without_cache_triggers_refresh(self, app, client, fake_store):
        response = client.get("/api/stats/stream", buffered=False)

        first = next(iter(response.response))
        assert first.startswith(b"data: ")
        assert fake_store.fetch_calls == 1
        response.close()
