import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ["APP_ENV"] = "dev"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SEARCH_URL", "http://search.test")
os.environ.setdefault("PUSH_DRY_RUN", "true")
os.environ.setdefault("SEARCH_DRY_RUN", "false")

from artmarket.core.config import settings
from artmarket.core.context import ServiceContext, get_context
from artmarket.db.base import Base
from artmarket.db.deps import get_db
# Import all models so Base.metadata includes every table
import artmarket.db.models as _models  # noqa: F401
from artmarket.main import app
from tests.helpers.fake_services import FakePushClient, FakeSearchClient

# Test database URL (in-memory SQLite for fast tests)
SQLALCHEMY_DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///:memory:")


def is_sqlite() -> bool:
    """Return True if the test database is SQLite (e.g. in-memory tests)."""
    url = SQLALCHEMY_DATABASE_URL or ""
    return url.startswith("sqlite")


# SQLite needs check_same_thread=False and StaticPool; Postgres does not support check_same_thread
if is_sqlite():
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Make the app and jobs use the same DB
import artmarket.db.session as _db_session

_db_session.engine = engine
_db_session.SessionLocal = TestingSessionLocal


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def search():
    return FakeSearchClient()


@pytest.fixture
def push():
    return FakePushClient()


@pytest.fixture
def ctx(search, push):
    """Service context wired to in-memory fakes."""
    return ServiceContext(settings=settings, search=search, push=push)


@pytest.fixture(scope="function")
def client(db, ctx):
    """Create a test client with database and service context overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_context] = lambda: ctx
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
