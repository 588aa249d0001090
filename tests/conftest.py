"""Shared fixtures for study assistant tests."""
import os
import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("STORAGE_TYPE", "local")
os.environ.setdefault("ANTHROPIC_API_KEY", "")
os.environ.setdefault("GEMINI_API_KEY", "")
os.environ.setdefault("RATE_LIMITING_ENABLED", "true")
os.environ.setdefault("DAILY_TOKEN_LIMIT", "1000000")

from datetime import datetime, timezone

from tests.fakes import (
    FakeRecognitionBackend,
    InMemoryContentRepository,
    InMemoryDocumentRepository,
    InMemoryFileStorage,
    InMemoryStudySetRepository,
    InMemoryUsageStore,
)


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables."""
    from study_assistant.core.database import create_db_engine
    from study_assistant.services.storage.sql_store import create_tables

    db_engine = create_db_engine("sqlite://")
    create_tables(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def fixed_clock():
    """Clock pinned to a known UTC instant."""
    instant = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def documents():
    return InMemoryDocumentRepository()


@pytest.fixture
def study_sets():
    return InMemoryStudySetRepository()


@pytest.fixture
def contents():
    return InMemoryContentRepository()


@pytest.fixture
def usage_store():
    return InMemoryUsageStore()


@pytest.fixture
def files():
    return InMemoryFileStorage()


@pytest.fixture
def ocr_backend():
    return FakeRecognitionBackend()
