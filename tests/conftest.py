# tests/conftest.py
"""
Shared fixtures: a fresh SQLite database file per test, a session factory
bound to it and an HTTP client for the app with its dependencies pointed
at that database.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TWELVE_DATA_API_KEY", "test-key")

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from stockforum.api import deps
from stockforum.api.security import create_access_token
from stockforum.infrastructure import models  # noqa: F401  registers tables
from stockforum.infrastructure.db.session import create_tables
from stockforum.infrastructure.quote_client import TwelveDataClient
from stockforum.infrastructure.repositories.user_repo import create_user_repo
from stockforum.main import create_app
from stockforum.services.price_service import ImportPolicy

# Policy for tests: small batches, no waiting.
FAST_POLICY = ImportPolicy(batch_size=2, batch_delay=0, rate_limit_backoff=0, requests_per_day=800)


def quote_payload(symbol: str, close: float = 100.0, previous_close: float = 95.0) -> dict:
    return {
        "symbol": symbol,
        "name": f"{symbol} Inc",
        "exchange": "NYSE",
        "currency": "USD",
        "close": str(close),
        "previous_close": str(previous_close),
    }


def default_quote_handler(request: httpx.Request) -> httpx.Response:
    symbol = request.url.params["symbol"]
    if symbol == "FAIL":
        return httpx.Response(200, json={"status": "error", "code": 400, "message": "symbol not found"})
    return httpx.Response(200, json=quote_payload(symbol))


@pytest_asyncio.fixture
async def engine(tmp_path):
    # a file, not :memory:, so concurrent importer sessions get their own connections
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'forum.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def alice(db):
    return await create_user_repo(db, "alice")


@pytest_asyncio.fixture
async def bob(db):
    return await create_user_repo(db, "bob")


@pytest.fixture
def auth():
    """Bearer headers for a user."""
    def headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return headers


@pytest.fixture
def app(session_factory):
    app = create_app()

    async def override_db():
        async with session_factory() as session:
            yield session

    def quote_client_factory():
        return lambda: TwelveDataClient(
            "test-key",
            http_client=httpx.AsyncClient(
                transport=httpx.MockTransport(default_quote_handler), base_url="https://quotes.test"
            ),
        )

    app.dependency_overrides[deps.get_db] = override_db
    app.dependency_overrides[deps.get_session_factory] = lambda: session_factory
    app.dependency_overrides[deps.get_quote_client_factory] = quote_client_factory
    app.dependency_overrides[deps.get_import_policy] = lambda: FAST_POLICY
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
