"""Test fixtures for pipeline and API tests."""

import json
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
import sys
from pathlib import Path
import os


def ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.append(str(src_path))


ensure_src_on_path()

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RECIPE_MIRROR_URL", "")

try:
    from api.routers import imports, reports
except ImportError:
    from src.api.routers import imports, reports

from models import Base, get_db
from services.recipe_extraction import RecipeImporter, SqlPatternStore
from services.recipe_extraction.fetcher import FetchError
from services.recipe_extraction.models import StrategyName


class FakeFetcher:
    """Serves canned bodies by URL and records every request."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    async def fetch_text(self, url, *, timeout=None, user_agent=None, headers=None):
        self.calls.append((url, user_agent))
        body = self.pages.get(url)
        if body is None:
            raise FetchError(f"Fetch failed for {url}: 404")
        if isinstance(body, Exception):
            raise body
        if isinstance(body, (dict, list)):
            return json.dumps(body)
        return body

    async def fetch_json(self, url, *, timeout=None, user_agent=None):
        return json.loads(await self.fetch_text(url, timeout=timeout, user_agent=user_agent))


class MemoryPatternStore:
    """In-process pattern store with the same counting rules as the SQL store."""

    def __init__(self, min_success_rate=0.5, min_samples=3, fail_with=None):
        self.min_success_rate = min_success_rate
        self.min_samples = min_samples
        self.fail_with = fail_with
        self.patterns = {}
        self.attempts = []
        self.sites = {}

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def get_best_extraction_method(self, site_type, html_pattern):
        self._check()
        best = None
        for (site, pattern, method, _version), counts in self.patterns.items():
            if site != site_type.value or pattern != html_pattern:
                continue
            rate = counts["success"] / counts["samples"]
            if counts["samples"] < self.min_samples or rate < self.min_success_rate:
                continue
            if best is None or (rate, counts["samples"]) > best[0]:
                best = ((rate, counts["samples"]), method)
        return StrategyName(best[1]) if best else None

    def update_extraction_pattern(self, site_type, html_pattern, strategy, parser_version, success):
        self._check()
        key = (site_type.value, html_pattern, strategy.value, parser_version)
        counts = self.patterns.setdefault(key, {"success": 0, "failure": 0, "samples": 0})
        counts["success" if success else "failure"] += 1
        counts["samples"] += 1

    def log_import_attempt(self, attempt):
        self._check()
        self.attempts.append(attempt)
        return len(self.attempts)

    def record_discovered_site(self, host, detection_method):
        self._check()
        self.sites[host] = detection_method

    def discovered_hosts(self):
        self._check()
        return list(self.sites)


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def memory_store():
    return MemoryPatternStore()


@pytest.fixture
def make_store():
    return MemoryPatternStore


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def sql_store(session_factory):
    return SqlPatternStore(session_factory=session_factory, min_success_rate=0.5, min_samples=3)


@pytest.fixture(scope="function")
def test_app():
    @asynccontextmanager
    async def test_lifespan(app: FastAPI) -> AsyncGenerator:
        yield

    app = FastAPI(
        title="RecipeLens Test",
        description="Recover structured recipes from social and recipe-publisher pages",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    app.include_router(imports.router, prefix="/api/v1/imports", tags=["imports"])
    app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])

    @app.get("/")
    async def root():
        return {
            "name": "RecipeLens",
            "version": "0.1.0",
            "status": "running",
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest.fixture(scope="function")
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture(scope="function")
def api_store():
    return MemoryPatternStore()


@pytest.fixture(scope="function")
def client(session_factory, test_app: FastAPI, fake_fetcher: FakeFetcher, api_store: MemoryPatternStore):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    importer = RecipeImporter(store=api_store, fetcher=fake_fetcher)

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[imports.get_importer] = lambda: importer
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()
