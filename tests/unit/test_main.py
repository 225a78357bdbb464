"""
Unit tests for backend/main.py
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import patch

from backend.main import create_app, _init_sentry, _configure_cors
from backend.settings import Settings


@pytest.mark.unit
class TestCreateApp:
    """Test the create_app() factory function."""

    def test_create_app_returns_fastapi_instance(self):
        """create_app() should return a FastAPI application instance."""
        settings = Settings(environment="test", _env_file=None)
        app = create_app(settings=settings)
        assert isinstance(app, FastAPI)

    def test_create_app_uses_default_settings_when_none_provided(self):
        """create_app() should use get_settings() when no settings provided."""
        with patch("backend.main.get_settings") as mock_get_settings:
            mock_get_settings.return_value = Settings(environment="test", _env_file=None)

            app = create_app(settings=None)

            mock_get_settings.assert_called_once()
            assert isinstance(app, FastAPI)

    def test_create_app_configures_app_metadata(self):
        """create_app() should configure app title and version."""
        settings = Settings(environment="test", _env_file=None)
        app = create_app(settings=settings)

        assert app.title == "Workout Insights API"
        assert app.version == "1.0.0"

    def test_create_app_registers_routes(self):
        settings = Settings(environment="test", _env_file=None)
        paths = {route.path for route in create_app(settings=settings).routes}

        assert {"/health", "/health/engine", "/metrics", "/analysis", "/analysis/context"} <= paths


@pytest.mark.unit
class TestInitSentry:
    """Test Sentry initialization."""

    def test_init_sentry_skipped_when_no_dsn(self):
        """Sentry should not be initialized when DSN is not set."""
        settings = Settings(sentry_dsn=None, _env_file=None)

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_not_called()

    def test_init_sentry_called_when_dsn_provided(self):
        """Sentry should be initialized when DSN is provided."""
        settings = Settings(
            sentry_dsn="https://test@sentry.io/123",
            environment="test",
            _env_file=None,
        )

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_called_once_with(
                dsn="https://test@sentry.io/123",
                environment="test",
                traces_sample_rate=0.1,
                profiles_sample_rate=0.1,
            )


@pytest.mark.unit
class TestConfigureCors:
    """Test CORS configuration."""

    def test_configure_cors_adds_middleware(self):
        """_configure_cors should add CORS middleware to the app."""
        app = FastAPI()
        initial_middleware_count = len(app.user_middleware)

        _configure_cors(app, Settings(environment="test", _env_file=None))

        assert len(app.user_middleware) == initial_middleware_count + 1

    def test_configure_cors_includes_extra_origins(self):
        app = FastAPI()
        settings = Settings(cors_allowed_origins="https://app.example", _env_file=None)

        _configure_cors(app, settings)

        origins = app.user_middleware[0].kwargs["allow_origins"]
        assert "https://app.example" in origins
        assert "http://localhost:3000" in origins


@pytest.mark.integration
class TestAppIntegration:
    """Integration tests for the created app."""

    def test_health_endpoint(self):
        """Created app should answer the liveness check."""
        settings = Settings(environment="test", _env_file=None)
        client = TestClient(create_app(settings=settings))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_cors_allows_requests(self):
        """CORS should allow cross-origin requests."""
        settings = Settings(environment="test", _env_file=None)
        app = create_app(settings=settings)

        @app.get("/test-cors")
        def cors_test():
            return {"cors": "enabled"}

        client = TestClient(app)
        response = client.get("/test-cors", headers={"Origin": "http://localhost:3000"})

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


@pytest.mark.unit
class TestMultipleAppInstances:
    """Test that multiple app instances can be created."""

    def test_create_multiple_independent_apps(self):
        settings1 = Settings(environment="test", _env_file=None)
        settings2 = Settings(environment="production", _env_file=None)

        app1 = create_app(settings=settings1)
        app2 = create_app(settings=settings2)

        assert app1 is not app2
        assert isinstance(app1, FastAPI)
        assert isinstance(app2, FastAPI)
