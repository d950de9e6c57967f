import pytest
from fastapi.testclient import TestClient

from plausible_proxy.middleware import PlausibleProxyMiddleware


@pytest.fixture(scope="module")
def test_client():
    from plausible_proxy.server import app

    with TestClient(app) as client:
        yield client


def test_health(test_client):
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_metrics_exposed(test_client):
    test_client.get("/health")
    response = test_client.get("/metrics")
    assert response.status_code == 200
    assert "fastapi_app_info" in response.text


def test_unknown_route_passes_through_to_app(test_client):
    assert test_client.get("/does-not-exist").status_code == 404


def test_proxy_middleware_installed():
    from plausible_proxy.server import app

    assert any(m.cls is PlausibleProxyMiddleware for m in app.user_middleware)
