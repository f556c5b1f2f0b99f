"""
Pytest configuration and shared fixtures for the barbershop backend tests.

Every test gets its own in-memory SQLite database, so nothing here can
reach a real server.
"""

import datetime
import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

os.environ["FLASK_ENV"] = "testing"
os.environ["TESTING"] = "True"

from main import create_app  # noqa: E402
from barbershop.config import Config  # noqa: E402
from barbershop.services.retry import RetryPolicy  # noqa: E402
from barbershop.services.schema import initialize_schema  # noqa: E402
from barbershop.services.seed import seed_if_empty  # noqa: E402
from barbershop.services.store import MemoryStore, SqlStore  # noqa: E402

TODAY = datetime.date(2025, 4, 1)


def no_sleep(delay):
    return None


class SqliteConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-for-testing-only"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    DB_RETRY_BASE_DELAY = 0.0
    DB_STATUS_TIMEOUT = 5.0
    INIT_DB_ON_STARTUP = False


class MockConfig(SqliteConfig):
    SQLALCHEMY_DATABASE_URI = None


@pytest.fixture
def engine():
    """A private in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture
def empty_store(engine):
    """SqlStore over a database with no tables yet."""
    return SqlStore(engine, retry=RetryPolicy(sleep=no_sleep))


@pytest.fixture
def store(empty_store):
    """SqlStore with every table created and no rows."""
    assert initialize_schema(empty_store)
    return empty_store


@pytest.fixture
def seeded_store(store):
    """SqlStore holding the sample customers, services, appointments and products."""
    assert seed_if_empty(store)
    return store


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def today():
    """Fixed business date so date windows do not depend on the clock."""
    return TODAY


@pytest.fixture
def app():
    """Create and configure a test app instance."""
    app = create_app(SqliteConfig)
    yield app
    app.extensions["connection"].dispose()


@pytest.fixture
def mock_app():
    """An app without a database URL, served by the in-memory mock store."""
    return create_app(MockConfig)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def mock_client(mock_app):
    return mock_app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()
