"""
Tests for health and version endpoints
"""
from fastapi import status


def test_health_endpoint(client):
    response = client.get("/api/v1/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "service": "hrms-leave-service"}


def test_version_endpoint_accessible_without_auth(client):
    response = client.get("/api/v1/version")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["service"] == "hrms-leave-service"
    assert "version" in data
    assert data["env"] in ["local", "staging", "prod"]


def test_error_responses_carry_code(client, employee, headers_for):
    response = client.post("/api/v1/leaves/999/cancel", headers=headers_for(employee))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    body = response.json()
    assert body["error"] is True
    assert body["code"] == "NOT_FOUND"
    assert body["path"] == "/api/v1/leaves/999/cancel"
