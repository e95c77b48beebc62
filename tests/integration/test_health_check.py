import pytest

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_reports_services(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["services"]["database"]["status"] == "up"
        assert data["services"]["cache"]["status"] == "up"
        assert data["services"]["outbox"] == {"pending": 0, "failed": 0}
        assert "timestamp" in data
