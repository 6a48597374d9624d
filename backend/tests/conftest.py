"""Pytest fixtures for storage accounting tests.

Provides reusable test fixtures for:
- Database session with fresh tables per test
- A test studio (with and without a plan)
- An in-memory blob store
- A FastAPI test client authenticated with the internal token

Usage:
    @pytest.mark.asyncio
    async def test_recompute(db_session, test_studio, blob_store):
        service = StorageUsageService(db_session, blob_store)
        report = await service.recompute(test_studio.slug)
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("INTERNAL_API_TOKEN", "test-internal-token")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

import models  # noqa: F401  registers every table on Base.metadata
from models.base import Base
from models.plan import PlatformPlan
from models.studio import Studio
from fixtures.fake_blob_store import FakeBlobStore

TEST_DATABASE_URL = os.environ["DATABASE_URL"]
INTERNAL_TOKEN = os.environ["INTERNAL_API_TOKEN"]

if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared in-memory database across threads (TestClient runs sync routes in a threadpool)
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # Enforce ON DELETE CASCADE like PostgreSQL does
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    test_engine = create_engine(TEST_DATABASE_URL)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


from database import get_db as database_get_db
from dependencies import get_blob_store


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def test_studio(db_session: Session) -> Studio:
    """Create a studio without a plan (default quota applies)."""
    studio = Studio(slug="foto-lumen", name="Foto Lumen")
    db_session.add(studio)
    db_session.commit()
    db_session.refresh(studio)
    return studio


@pytest.fixture(scope="function")
def planned_studio(db_session: Session) -> Studio:
    """Create a studio on a 50 GB plan."""
    plan = PlatformPlan(name="Pro", storage_limit_gb=50)
    studio = Studio(slug="atelier-nord", name="Atelier Nord", plan=plan)
    db_session.add_all([plan, studio])
    db_session.commit()
    db_session.refresh(studio)
    return studio


@pytest.fixture(scope="function")
def blob_store() -> FakeBlobStore:
    """Empty in-memory blob store."""
    return FakeBlobStore()


@pytest.fixture(scope="function")
def client(db_session: Session, blob_store: FakeBlobStore):
    """Test client using the test database and the in-memory blob store.

    Sends the internal token on every request.
    """
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    test_client = TestClient(app)
    test_client.headers.update({"X-Internal-Token": INTERNAL_TOKEN})

    yield test_client

    app.dependency_overrides.clear()
