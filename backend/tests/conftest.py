"""
Central pytest configuration for the parlor booking tests.

Environment variables are set before any application module is imported,
because configuration is read once at import time.
"""

import os

# Test database configuration (set early so import-time engines use it)
TEST_DATABASE_URL = "sqlite:///:memory:"  # In-memory SQLite for fast tests
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"  # Disable rate limiting in tests
os.environ["LOG_TO_FILE"] = "0"
os.environ.pop("GOOGLE_CALENDAR_ACCESS_TOKEN", None)  # Calendar sync off
os.environ.pop("BUSINESS_HOURS", None)  # Default 09:00-19:00 every day
os.environ.pop("SENTRY_DSN", None)

import pytest  # noqa: E402

from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)


# =====================================================
# FLASK APPLICATION FIXTURES
# =====================================================


@pytest.fixture(scope="session")
def app():
    """One Flask application per test session.

    Prometheus metrics live in a process-wide registry, so the app is
    created only once.
    """
    from parlor_booking.main import create_app

    app = create_app({"TESTING": True, "PROPAGATE_EXCEPTIONS": False})
    return app


@pytest.fixture
def reset_database():
    """Fresh, empty tables for every test that touches the database."""
    from parlor_booking.db.session import create_tables, drop_tables

    drop_tables()
    create_tables()
    yield
    drop_tables()


@pytest.fixture
def client(app, reset_database):
    """Test client backed by an empty database."""
    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture
def db_session(reset_database):
    """A real SQLAlchemy session on the in-memory test database."""
    from parlor_booking.db.session import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_services(reset_database):
    """The six default parlor services, keyed by slug."""
    from parlor_booking.db.seed import ensure_default_services
    from parlor_booking.db.session import SessionLocal
    from parlor_booking.repositories.service_repo import ServiceRepository

    ensure_default_services()
    session = SessionLocal()
    try:
        return {s.slug: s for s in ServiceRepository(session).list()}
    finally:
        session.close()
