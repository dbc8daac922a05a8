"""Shared pytest fixtures for findyouth tests."""

import io

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from findyouth.auth.local import LocalAuthProvider
from findyouth.db import repo
from findyouth.db.schema import Base
from findyouth.models.domain import CAUSE_AREAS
from findyouth.storage.local import LocalObjectStorage

TEST_SECRET = "test-secret"
TEST_STORAGE_URL = "http://testserver/storage"


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session with the cause vocabulary seeded."""
    Session = sessionmaker(bind=engine)
    session = Session()
    repo.ensure_causes(session, CAUSE_AREAS)
    session.commit()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    """Create filesystem object storage under a temporary directory."""
    return LocalObjectStorage(tmp_path / "storage", TEST_STORAGE_URL)


@pytest.fixture
def auth(session):
    """Create a database-backed auth provider."""
    return LocalAuthProvider(session, TEST_SECRET)


@pytest.fixture
def make_image():
    """Factory for encoded image bytes of a given size and format."""

    def _make(width: int, height: int, fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), color=(40, 120, 200)).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make
