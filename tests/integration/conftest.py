"""Pytest fixtures for integration tests.

Provides an in-memory SQLite database with the Taskboard schema, sessions
bound to it, and an HTTP client for the FastAPI app wired to the same
database. The production system runs on PostgreSQL; the queries used here
are portable.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.config import DatabaseConfig, TaskboardConfig, UploadConfig
from taskboard.database.connection import Database
from taskboard.permissions import Principal, resolve_principal
from taskboard.uploads import LocalUploadStore
from taskboard.web.app import create_app


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """In-memory SQLite database with all tables created.

    Yields:
        Database handle, disposed after the test.
    """
    db = Database(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session_factory(database: Database) -> async_sessionmaker[AsyncSession]:
    return database.session_factory


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session for the duration of one test, rolled back afterwards."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def upload_store(tmp_path: Path) -> LocalUploadStore:
    return LocalUploadStore(UploadConfig(root=tmp_path / "uploads", max_bytes=1024))


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    upload_store: LocalUploadStore,
) -> FastAPI:
    """FastAPI app sharing the test database.

    ASGITransport does not run the lifespan, so the state it would set up
    is assigned here.
    """
    application = create_app(TaskboardConfig())
    application.state.session_factory = session_factory
    application.state.upload_store = upload_store
    return application


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the test app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def principal() -> Callable[..., Principal]:
    """Build a principal from an id and optional email/name."""

    def _make(user_id: str | None = None, email: str | None = None, name: str | None = None) -> Principal:
        resolved = resolve_principal(user_id, email, name)
        assert resolved is not None
        return resolved

    return _make


@pytest.fixture
def identity() -> Callable[..., dict[str, str]]:
    """Build identity headers for a request."""

    def _headers(user_id: str | None = None, email: str | None = None, name: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if user_id:
            headers["X-User-Id"] = user_id
        if email:
            headers["X-User-Email"] = email
        if name:
            headers["X-User-Name"] = name
        return headers

    return _headers
