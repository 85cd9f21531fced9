"""Pytest fixtures for E2E tests.

The whole stack runs in-process: the FastAPI app from create_app, the real
service and query layers, an in-memory SQLite database and a local upload
store under the test's temporary directory. Callers are identified by the
same headers an upstream identity provider would forward.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taskboard.config import DatabaseConfig, TaskboardConfig, UploadConfig
from taskboard.database.connection import Database
from taskboard.uploads import LocalUploadStore
from taskboard.web.app import create_app


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def e2e_config(tmp_path: Path) -> TaskboardConfig:
    return TaskboardConfig(
        database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"),
        uploads=UploadConfig(root=tmp_path / "uploads"),
    )


@pytest_asyncio.fixture
async def e2e_database(e2e_config: TaskboardConfig) -> AsyncGenerator[Database, None]:
    db = Database(e2e_config.database)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def client(
    e2e_config: TaskboardConfig,
    e2e_database: Database,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an app wired the way its lifespan would wire it."""
    app = create_app(e2e_config)
    app.state.database = e2e_database
    app.state.session_factory = e2e_database.session_factory
    app.state.upload_store = LocalUploadStore(e2e_config.uploads)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
def as_user() -> Callable[..., dict[str, str]]:
    """Identity headers for a user id and optional email."""

    def _headers(user_id: str, email: str | None = None) -> dict[str, str]:
        headers = {"X-User-Id": user_id}
        if email:
            headers["X-User-Email"] = email
        return headers

    return _headers
