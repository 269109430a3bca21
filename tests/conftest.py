"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
_TEST_DIR = tempfile.mkdtemp(prefix="clip-curator-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR}/test.db"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_BROKER_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_RESULT_BACKEND"] = "redis://localhost:6379/1"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LLM_PROVIDER"] = "mock"
os.environ["STT_PROVIDER"] = "mock"
os.environ["STORAGE_PROVIDER"] = "stub"
os.environ["MEDIA_PROVIDER"] = "stub"
os.environ["VIDEO_SOURCE_PROVIDER"] = "stub"
os.environ["STORAGE_BASE_PATH"] = f"{_TEST_DIR}/storage"
os.environ["PRESIGN_SECRET"] = "test-secret"
os.environ["STEP_BACKOFF_SECONDS"] = "0"
os.environ["STEP_BACKOFF_MAX_SECONDS"] = "0"


@pytest.fixture
def db() -> Generator[None, None, None]:
    """Fresh schema for each test."""
    from clip_curator.db.models import Base
    from clip_curator.db.session import engine

    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def session(db: None) -> Generator:
    from clip_curator.db.session import SessionLocal

    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def session_factory(db: None):
    from clip_curator.db.session import get_session_context

    return get_session_context


@pytest.fixture
def test_client(db: None) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from clip_curator.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def llm():
    from clip_curator.adapters.llm.mock import MockLLMClient

    return MockLLMClient()


@pytest.fixture
def storage():
    from clip_curator.adapters.storage.stub import StubStorageProvider

    return StubStorageProvider()


@pytest.fixture
def providers(llm, storage):
    """Stage collaborators that never leave the process."""
    from clip_curator.adapters.media.stub import StubMediaProcessor
    from clip_curator.adapters.stt.mock import MockSTTProvider
    from clip_curator.adapters.video_source.stub import StubVideoSource
    from clip_curator.jobs.stages import Providers

    return Providers(
        llm=llm,
        stt=MockSTTProvider(),
        storage=storage,
        media=StubMediaProcessor(),
        source=StubVideoSource(),
    )
