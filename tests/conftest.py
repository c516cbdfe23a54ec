"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from timetable.config import get_settings
from timetable.domain.event import SubjectFields
from timetable.infrastructure.db.session import Base
from timetable.infrastructure.db import models  # noqa: F401  registers tables on Base
from timetable.infrastructure.stores import SubjectStore


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; drop the cache so monkeypatched env is picked up"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs in a worker thread)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def tz():
    return get_settings().get_timezone()


@pytest.fixture
def make_subject(db_session):
    """Insert a subject directly through the store"""
    def _make(name="Math", color="#3B82F6", is_active=True):
        return SubjectStore(db_session).insert(SubjectFields(name=name, color=color, is_active=is_active))
    return _make
