"""Pytest configuration.

Puts ``backend/`` on ``sys.path`` and points the app at an in-memory SQLite
database before ``ripreel`` is imported. Every test gets a fresh schema
shared through a StaticPool, the ``get_db`` dependency bound to it, and
recorders in place of the Celery dispatchers.
"""
import os
import sys
import tempfile

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
BACKEND = os.path.join(ROOT, "backend")
if BACKEND not in sys.path:
    sys.path.insert(0, BACKEND)

os.environ["DB_URL"] = "sqlite+aiosqlite://"
os.environ["MEDIA_VOLUME"] = os.path.join(tempfile.gettempdir(), "ripreel-test-media")
os.environ["MAX_CONCURRENT_VIDEO_JOBS"] = "3"
os.environ["APP_URL"] = "http://ripreel.test"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import ripreel.models  # noqa: F401
from ripreel.api.deps import get_variant_dispatcher, get_video_dispatcher
from ripreel.database import Base, get_db
from ripreel.errors import UpstreamFetchError
from ripreel.main import app
from ripreel.services import storage


class DispatchRecorder:
    """Stands in for a Celery ``.delay`` call; remembers what was dispatched."""

    def __init__(self):
        self.calls: list[str] = []

    def __call__(self, item_id: str) -> None:
        self.calls.append(item_id)


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def video_dispatch():
    return DispatchRecorder()


@pytest.fixture
def variant_dispatch():
    return DispatchRecorder()


@pytest.fixture(autouse=True)
def offline_storage(monkeypatch, tmp_path):
    """No real downloads; media lands in a per-test directory."""

    async def _unreachable(url: str) -> bytes:
        raise UpstreamFetchError(f"network disabled in tests: {url}")

    monkeypatch.setattr(storage, "fetch_remote", _unreachable)
    monkeypatch.setattr(storage.settings, "MEDIA_VOLUME", str(tmp_path))
    return tmp_path


@pytest_asyncio.fixture
async def client(session_factory, video_dispatch, variant_dispatch):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_video_dispatcher] = lambda: video_dispatch
    app.dependency_overrides[get_variant_dispatcher] = lambda: variant_dispatch

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
