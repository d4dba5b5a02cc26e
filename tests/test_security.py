"""
Tests for the cache administration endpoints and their token guard.
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from main import app, rate_limiter
from api.learning import get_orchestrator
from api.security import verify_api_token
from services.orchestrator import LearningOrchestrator
from conftest import make_envelope


@pytest.fixture
def client(cache):
    cache.set("dQw4w9WgXcQ", make_envelope(video_id="dQw4w9WgXcQ"))
    cache.set("transcript_2e9", make_envelope())
    orchestrator = LearningOrchestrator(cache=cache, ai_service=MagicMock(), fetcher=MagicMock())
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    rate_limiter.reset()


class TestSecurity:
    """Test security functionality."""

    @patch('config.config.api_token', 'test_token_123')
    def test_stats_without_token(self, client):
        """Admin endpoints require a bearer token once one is configured."""
        response = client.get("/api/cache/stats")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Authentication required"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @patch('config.config.api_token', 'test_token_123')
    def test_stats_with_invalid_token(self, client):
        response = client.get("/api/cache/stats", headers={"Authorization": "Bearer invalid_token"})

        assert response.status_code == 401
        assert "Invalid authentication token" in response.json()["error"]

    @patch('config.config.api_token', 'test_token_123')
    def test_stats_with_valid_token(self, client):
        response = client.get("/api/cache/stats", headers={"Authorization": "Bearer test_token_123"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["stats"]["keys"] == 2
        assert data["stats"]["ttl"] == 3600
        assert sorted(data["keys"]) == ["dQw4w9WgXcQ", "transcript_2e9"]

    @patch('config.config.api_token', 'test_token_123')
    def test_invalidate_single_entry(self, client, cache):
        headers = {"Authorization": "Bearer test_token_123"}

        response = client.delete("/api/cache/dQw4w9WgXcQ", headers=headers)
        again = client.delete("/api/cache/dQw4w9WgXcQ", headers=headers)

        assert response.json() == {"success": True, "deleted": 1}
        assert again.json() == {"success": True, "deleted": 0}
        assert cache.get("dQw4w9WgXcQ") is None
        assert cache.get("transcript_2e9") is not None

    @patch('config.config.api_token', 'test_token_123')
    def test_clear_cache(self, client, cache):
        response = client.delete("/api/cache", headers={"Authorization": "Bearer test_token_123"})

        assert response.status_code == 200
        assert cache.size() == 0

    @patch('config.config.api_token', None)
    def test_open_without_token_in_development(self, client):
        with patch('config.config.environment', 'development'):
            response = client.get("/api/cache/stats")

        assert response.status_code == 200

    @patch('config.config.api_token', None)
    def test_disabled_without_token_in_production(self, client, cache):
        with patch('config.config.environment', 'production'):
            response = client.delete("/api/cache")

        assert response.status_code == 403
        assert response.json()["error"] == "Administrative endpoints are disabled"
        assert cache.size() == 2

    def test_health_needs_no_token(self, client):
        with patch('config.config.api_token', 'test_token_123'):
            response = client.get("/api/health")

        assert response.status_code == 200


class TestVerifyApiToken:
    """Direct checks of the token comparison."""

    @patch('config.config.api_token', 'secret')
    def test_matching_token(self):
        assert verify_api_token("secret") is True

    @patch('config.config.api_token', 'secret')
    def test_wrong_or_missing_token(self):
        assert verify_api_token("other") is False
        assert verify_api_token("") is False
        assert verify_api_token(None) is False

    @patch('config.config.api_token', None)
    def test_no_configured_token(self):
        assert verify_api_token(None) is True
