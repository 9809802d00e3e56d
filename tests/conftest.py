"""
Test configuration and fixtures.
"""
import os
import tempfile
from datetime import datetime
from typing import Generator

import pytest
import pytz

# Settings are read once and cached, so point them at throwaway locations
# before anything from the app is imported.
_TEST_ROOT = tempfile.mkdtemp(prefix="kasir-tests-")
TEST_API_KEY = "k1-test-key-for-the-suite"
TEST_USER = "tester"

os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT}/app.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["DEFAULT_API_KEY"] = TEST_API_KEY
os.environ["DEFAULT_API_USER"] = TEST_USER
os.environ["TIMEZONE"] = "Asia/Jakarta"

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from kasir.core.config import get_settings
from kasir.db.session import build_engine, get_db
from kasir.main import app
from kasir.services.bootstrap import init_db, seed_defaults
from kasir.services.document_store import DocumentStore


@pytest.fixture(scope="function")
def engine(tmp_path):
    """A fresh SQLite database file per test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'kasir.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Generator[Session, None, None]:
    """Create a database session for the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def store(db: Session) -> DocumentStore:
    """Document store over the test database, seeded with the base documents and the test key."""
    store = DocumentStore(db)
    seed_defaults(store, get_settings())
    return store


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def fixed_clock():
    """Clock frozen at 20 May 2024, 10:00 in Jakarta."""
    moment = pytz.timezone("Asia/Jakarta").localize(datetime(2024, 5, 20, 10, 0))
    return lambda: moment


@pytest.fixture(scope="function")
def client(db: Session, store: DocumentStore) -> Generator[TestClient, None, None]:
    """Create test client with database session override."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"X-API-Key": TEST_API_KEY}
