import os
import pytest
from fastapi.testclient import TestClient

# Ensure test-friendly environment prior to importing the app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("METRICS_ENABLED", "1")

from app.main import app  # noqa: E402

@pytest.fixture(scope="module")
def client():
    # No context manager: lifespan (and so the database) is not started
    return TestClient(app)

def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert "x-request-id" in resp.headers

def test_security_headers(client):
    resp = client.get("/health")
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"

def test_openapi_json(client):
    resp = client.get("/openapi.json")
    assert resp.status_code == 200
    paths = resp.json()["paths"]
    assert "/auth/send-otp" in paths
    assert "/auth/verify-otp" in paths
    assert "/location/analyze" in paths

def test_docs_page(client):
    resp = client.get("/docs")
    assert resp.status_code == 200
    assert "text/html" in resp.headers.get("content-type", "")

def test_metrics_endpoint(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "text" in resp.headers.get("content-type", "").lower()

def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}
