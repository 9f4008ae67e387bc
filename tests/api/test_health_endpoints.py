"""
Test suite for health and informational endpoints.

Covers GET /, GET /api, GET /api/health, unknown routes and the
application lifespan.

System role: Verification of service liveness and readiness
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from ragchat.api.deps import AppContext, get_app_context
from ragchat.api.main import create_app
from ragchat.configs.settings import Settings
from ragchat.core.rag.pipeline import ConversationPipeline
from ragchat.core.rag.schemas import PipelineState


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


class TestInfoEndpoints:

    def test_root(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "Server is working fine"}

    def test_api_welcome(self, client: TestClient) -> None:
        response = client.get("/api")

        assert response.status_code == 200
        assert response.json() == {"message": "Welcome to the RAG API. The server is running."}

    def test_unknown_route_returns_404(self, client: TestClient) -> None:
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"error": "Endpoint not found"}


class TestHealthEndpoint:

    def test_health_reports_pipeline_state(self, settings: Settings) -> None:
        # Arrange
        app = create_app(settings)
        pipeline = MagicMock()
        pipeline.is_ready = True
        pipeline.state = PipelineState.READY
        app.dependency_overrides[get_app_context] = lambda: AppContext(
            settings=settings, provider=MagicMock(), pipeline=pipeline
        )

        # Act
        response = TestClient(app).get("/api/health")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "pipeline_state": "ready"}

    def test_health_without_context_is_503(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.status_code == 503
        assert response.json() == {"error": "Service is not ready"}


class TestLifespan:
    """Eager pipeline initialization at startup."""

    def test_startup_initializes_pipeline(self, settings: Settings, fake_provider) -> None:
        # Arrange
        def context_factory(app_settings: Settings) -> AppContext:
            pipeline = ConversationPipeline(provider=fake_provider, settings=app_settings)
            return AppContext(settings=app_settings, provider=fake_provider, pipeline=pipeline)

        app = create_app(settings, context_factory=context_factory)

        # Act
        with TestClient(app) as client:
            health = client.get("/api/health")
            answer = client.post("/api/query", json={"query": "What is X?"})

        # Assert
        assert health.json() == {"status": "healthy", "pipeline_state": "ready"}
        assert answer.status_code == 200
        assert answer.json()["answer"] == "X is a protocol for Y."
        assert answer.json()["retrievedDocs"] == 0
        assert fake_provider.chat_model_calls == 1

    def test_failed_startup_serves_503(self, settings: Settings) -> None:
        # Arrange
        provider = MagicMock()
        provider.name = "broken"
        provider.chat_model.side_effect = RuntimeError("missing API key")

        def context_factory(app_settings: Settings) -> AppContext:
            pipeline = ConversationPipeline(provider=provider, settings=app_settings)
            return AppContext(settings=app_settings, provider=provider, pipeline=pipeline)

        app = create_app(settings, context_factory=context_factory)

        # Act
        with TestClient(app) as client:
            health = client.get("/api/health")
            answer = client.post("/api/query", json={"query": "What is X?"})

        # Assert
        assert health.json() == {"status": "unavailable", "pipeline_state": "failed"}
        assert answer.status_code == 503
        assert answer.json() == {"error": "Service is not ready"}
