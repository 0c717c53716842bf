"""
Tests for the health endpoint.
"""


class TestHealth:
    def test_health(self, api_client) -> None:
        response = api_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
