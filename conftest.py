"""
Shared pytest fixtures: an app on in-memory SQLite, an authenticated client,
an isolated keyword cache and a controllable clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cv_scanner.app import create_app
from cv_scanner.extensions import db as _db
from cv_scanner.services.cv_scanning.ingest import DocumentParsingError
from cv_scanner.services.keyword_cache import KeywordCache
from cv_scanner.services.stores import KeywordStore, ScanStore

TEST_SECRET = "test-secret"


class FakeClock:
    """Returns a UTC timestamp that moves forward by ``step`` on every call."""

    def __init__(self, start: datetime | None = None, step=timedelta(minutes=1)):
        self.current = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class FakeMonotonic:
    """Manually advanced float clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def text_as_pdf(payload: bytes) -> str:
    """Test stand-in for PDF extraction: uploads carry plain UTF-8 text."""
    if payload.startswith(b"BROKEN"):
        raise DocumentParsingError("Failed to read PDF: corrupted document")
    return payload.decode("utf-8")


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET": TEST_SECRET,
            "PDF_EXTRACT_BACKOFF_SECONDS": 0,
        }
    )
    app.extensions["cv_text_extractor"] = text_as_pdf
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "Recruiter@Example.com", "password": "secret123", "name": "Rita"},
    )
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def monotonic():
    return FakeMonotonic()


@pytest.fixture
def keyword_cache():
    return KeywordCache()


@pytest.fixture
def keyword_store(app, keyword_cache):
    return KeywordStore(cache=keyword_cache)


@pytest.fixture
def scan_store(app):
    return ScanStore()
