"""
Shared test fixtures for path-scraper.

Provides:
- db_session: In-memory SQLite session with all tables created
- session_factory: sessionmaker over a file-backed SQLite DB, for code that
  opens its own sessions (the pipeline)
- fetcher / summary_client / notifier: collaborator mocks with happy-path returns
- client: FastAPI TestClient with DB dependency override
"""

import os

# Force sqlite and stub service URLs for tests; must be set before any path_scraper imports.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AI_SERVICE_BASE_URL"] = "http://ai.test"
os.environ["MAIN_SERVICE_BASE_URL"] = "http://main.test"
os.environ["DISPATCH_AUTOSTART"] = "false"

from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from path_scraper.core.page_fetcher import PageFetcher
from path_scraper.dtos.page_content_dto import PageContent
from path_scraper.entities.base import Base
import path_scraper.entities.scraped_path  # noqa: F401
from path_scraper.services.summary_client import SummaryServiceClient
from path_scraper.services.upstream_notifier import UpstreamNotifier


@pytest.fixture
def db_session():
    """In-memory SQLite for unit tests. Never hits production DB."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestSession = sessionmaker(bind=engine)
    session = TestSession()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def session_factory(tmp_path):
    """File-backed SQLite so every session gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'scraper.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield factory
    engine.dispose()


@pytest.fixture
def page_content():
    return PageContent(text="text")


@pytest.fixture
def fetcher(page_content):
    mock = Mock(spec=PageFetcher)
    mock.fetch.return_value = page_content
    return mock


@pytest.fixture
def summary_client():
    mock = Mock(spec=SummaryServiceClient)
    mock.summarize.return_value = "S1"
    mock.merge.return_value = "S2"
    return mock


@pytest.fixture
def notifier():
    mock = Mock(spec=UpstreamNotifier)
    mock.get_previous_summary.return_value = "S0"
    mock.put_summary.return_value = {"ok": True}
    return mock


@pytest.fixture
def client(db_session: Session):
    """FastAPI TestClient with DB dependency overridden to use in-memory SQLite."""
    from fastapi.testclient import TestClient
    from path_scraper.core.database import get_db
    from path_scraper.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc
    app.dependency_overrides.clear()
