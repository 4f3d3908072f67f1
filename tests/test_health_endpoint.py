"""Test health endpoints"""


class TestHealthEndpoint:
    """Test health endpoint is accessible"""

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "eventtrackpro"

    def test_detailed_health_endpoint(self, client):
        response = client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["checks"]["database"] == "healthy"
        assert data["checks"]["environment"] == "healthy"
        assert data["checks"]["active_webhooks"] == 0
