"""Unit tests for FastAPI application setup.

Tests cover:
- Application factory creates FastAPI instance with all routers
- CORS and request logging middleware are configured
- Health endpoints return expected responses
- Domain errors are rendered with the mapped status code
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from httpx import ASGITransport, AsyncClient

from taskboard import __version__
from taskboard.config import AuthConfig, TaskboardConfig, WebConfig
from taskboard.errors import (
    DELETE_REQUIRES_DONE,
    Forbidden,
    InvalidInput,
    NotFound,
    PreconditionFailed,
    TaskboardError,
    Unauthorized,
)
from taskboard.web.app import create_app, status_for
from taskboard.web.middleware import RequestLoggingMiddleware


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestCreateApp:
    """Test application factory function."""

    def test_returns_fastapi_instance(self) -> None:
        app = create_app()
        assert isinstance(app, FastAPI)
        assert app.title == "Taskboard"
        assert app.version == __version__

    def test_app_stores_config_in_state(self) -> None:
        config = TaskboardConfig()
        app = create_app(config)
        assert app.state.config is config

    def test_uses_default_config_when_none_provided(self) -> None:
        app = create_app()
        assert isinstance(app.state.config, TaskboardConfig)

    def test_routers_are_mounted(self) -> None:
        app = create_app()
        paths = set(app.openapi()["paths"])
        for expected in (
            "/health/",
            "/health/ready",
            "/projects/",
            "/projects/{project_id}",
            "/projects/{project_id}/members",
            "/projects/{project_id}/tasks",
            "/tasks/",
            "/tasks/{task_id}",
            "/tasks/{task_id}/attachments",
            "/subtasks/",
            "/subtasks/{subtask_id}",
            "/users/me",
        ):
            assert expected in paths


class TestMiddleware:
    """Test middleware registration."""

    def test_cors_uses_config_origins(self) -> None:
        origins = ["https://app.example.com", "https://admin.example.com"]
        app = create_app(TaskboardConfig(web=WebConfig(cors_origins=origins)))

        cors = [m for m in app.user_middleware if m.cls == CORSMiddleware]
        assert len(cors) == 1
        assert cors[0].kwargs["allow_origins"] == origins
        assert cors[0].kwargs["allow_credentials"] is True

    def test_logging_middleware_is_registered(self) -> None:
        app = create_app()
        assert any(m.cls == RequestLoggingMiddleware for m in app.user_middleware)


class TestHealthEndpoints:
    """Test liveness and readiness endpoints."""

    async def test_health_returns_ok(self) -> None:
        app = create_app()
        app.state.session_factory = MagicMock()

        async with _client(app) as client:
            response = await client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_readiness_when_db_healthy(self) -> None:
        app = create_app()
        mock_session = AsyncMock()
        mock_session.execute = AsyncMock(return_value=MagicMock())
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(return_value=mock_session)
        factory.return_value.__aexit__ = AsyncMock(return_value=None)
        app.state.session_factory = factory

        async with _client(app) as client:
            response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "connected"}

    async def test_readiness_when_db_fails(self) -> None:
        app = create_app()
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(
            side_effect=Exception("Database connection failed")
        )
        factory.return_value.__aexit__ = AsyncMock(return_value=None)
        app.state.session_factory = factory

        async with _client(app) as client:
            response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "unhealthy", "database": "disconnected"}


class TestCorrelationId:
    """Test correlation ID handling in middleware."""

    async def test_response_includes_correlation_id(self) -> None:
        app = create_app()
        async with _client(app) as client:
            response = await client.get("/health/")
        assert response.headers["X-Correlation-ID"]

    async def test_response_echoes_provided_correlation_id(self) -> None:
        app = create_app()
        async with _client(app) as client:
            response = await client.get(
                "/health/", headers={"X-Correlation-ID": "corr-abc"}
            )
        assert response.headers["X-Correlation-ID"] == "corr-abc"


class TestErrorRendering:
    """Test the domain error handler."""

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (Unauthorized(), 401),
            (Forbidden(), 403),
            (NotFound("Task", "t-1"), 404),
            (InvalidInput("title is required", field="title"), 422),
            (PreconditionFailed(), 409),
            (TaskboardError("boom"), 500),
        ],
    )
    def test_status_for(self, error: TaskboardError, code: int) -> None:
        assert status_for(error) == code

    def test_subclass_uses_parent_mapping(self) -> None:
        class ProjectGone(NotFound):
            pass

        assert status_for(ProjectGone("Project")) == 404

    async def test_error_body_shape(self) -> None:
        app = create_app()

        async def refuse() -> None:
            raise PreconditionFailed()

        app.add_api_route("/refuse", refuse, methods=["DELETE"])

        async with _client(app) as client:
            response = await client.delete("/refuse")

        assert response.status_code == 409
        assert response.json() == {
            "error": "precondition_failed",
            "detail": DELETE_REQUIRES_DONE,
        }

    async def test_missing_identity_is_401(self) -> None:
        app = create_app()
        app.state.session_factory = MagicMock()

        async with _client(app) as client:
            response = await client.get("/projects/")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"
        app.state.session_factory.assert_not_called()

    async def test_identity_headers_come_from_config(self) -> None:
        config = TaskboardConfig(auth=AuthConfig(email_header="X-Forwarded-Email"))
        app = create_app(config)
        app.state.session_factory = MagicMock()

        async with _client(app) as client:
            response = await client.get(
                "/projects/", headers={"X-User-Email": "ana@example.com"}
            )

        assert response.status_code == 401
