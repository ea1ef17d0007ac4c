import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streakly import create_app
from streakly.core.auth.password import hash_password
from streakly.core.container import get_services
from streakly.core.users.models import User
from streakly.extensions import db


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "smoke: Quick smoke tests for CI")


class FixedClock:
    """Deterministic stand-in for ``utcnow`` that tests can move forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def app():
    """
    Create a per-test app on a fresh in-memory SQLite database.

    The schema is built from model metadata and dropped afterwards, so no
    rows leak between tests.
    """
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return get_services()


@pytest.fixture()
def clock():
    # Thursday 2024-01-18 12:00 in the tracking-day frame.
    return FixedClock(datetime(2024, 1, 18, 5, 0, 0))


@pytest.fixture()
def user(app):
    user = User(email="tester@example.com", password_hash=hash_password("secret123"), name="Tester")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def other_user(app):
    user = User(email="someone-else@example.com", password_hash=hash_password("secret123"))
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def auth_headers(services, user):
    tokens = services.auth.issue_tokens(user)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture()
def other_headers(services, other_user):
    tokens = services.auth.issue_tokens(other_user)
    return {"Authorization": f"Bearer {tokens['access_token']}"}
