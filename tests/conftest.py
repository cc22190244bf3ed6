"""Shared fixtures: a Flask app wired to an in-memory stand-in for Supabase."""
from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from vera import create_app
from vera.errors import StoreError
from vera.extensions import get_stats


class FakeStore:
    """Records calls and serves canned rows in place of SurveyStore."""

    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.fetch_calls = 0
        self.fetch_error: StoreError | None = None
        self.auth_error: StoreError | None = None
        self.listen_calls = 0

    def fetch_rows(self, columns):
        self.fetch_calls += 1
        self.last_columns = list(columns)
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.rows)

    def sign_up(self, email, password):
        if self.auth_error is not None:
            raise self.auth_error
        return {"id": "user-1", "email": email}

    def sign_in(self, email, password):
        if self.auth_error is not None:
            raise self.auth_error
        return {"access_token": "token-1", "user": {"email": email}}

    def listen(self, on_change, on_subscribed, stop: threading.Event):
        self.listen_calls += 1
        on_subscribed()
        stop.wait()


def iso_days_ago(days: int, hour: int = 12) -> str:
    moment = datetime.now(timezone.utc).replace(hour=hour, minute=0, second=0, microsecond=0)
    return (moment - timedelta(days=days)).isoformat()


@pytest.fixture
def sample_rows():
    return [
        {
            "age_tranche": "18-24",
            "utilisation_vera": "oui",
            "satisfaction_vera": 4,
            "contenu_rs": ["actualites", {"value": "sport"}],
            "created_at": iso_days_ago(0),
        },
        {
            "age_tranche": "25-34",
            "utilisation_vera": "non",
            "satisfaction_vera": 5,
            "contenu_rs": [{"label": "humour"}, "actualites"],
            "created_at": iso_days_ago(1),
        },
        {
            "age_tranche": "18-24",
            "utilisation_vera": None,
            "satisfaction_vera": None,
            "contenu_rs": None,
            "created_at": "not-a-date",
        },
    ]


@pytest.fixture
def fake_store(sample_rows):
    return FakeStore(sample_rows)


@pytest.fixture
def app(fake_store):
    app = create_app("testing", store=fake_store, store_source="env",
                     STREAM_KEEPALIVE_SECONDS=2.0)
    yield app
    with app.app_context():
        get_stats().shutdown()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def unconfigured_app():
    app = create_app("testing", store=None, store_source="env")
    yield app
    with app.app_context():
        get_stats().shutdown()


@pytest.fixture
def unconfigured_client(unconfigured_app):
    with unconfigured_app.test_client() as client:
        yield client
