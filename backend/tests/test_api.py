"""
Tests for the HTTP API.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from oas_runner.api.deps import get_auth_store, get_transport
from oas_runner.core.config import settings
from oas_runner.main import app

from conftest import FakeTransport

BASE = "https://api.example.com/v1"


@pytest.fixture
def transport():
    return FakeTransport(responses={("GET", f"{BASE}/pets/sample-petId"): (404, {"message": "missing"})})


@pytest.fixture
def client(tmp_path, monkeypatch, transport, auth_store):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "logs"))
    app.dependency_overrides[get_transport] = lambda: transport
    app.dependency_overrides[get_auth_store] = lambda: auth_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert "X-Process-Time" in response.headers


def test_metrics(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "endpoint_tests_total" in response.text


def test_run_inline_spec(client, petstore_spec, transport):
    response = client.post("/api/v1/oas/test", json={"spec": petstore_spec})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["total"] == 4
    assert body["summary"]["failed"] == 1
    assert body["summary"]["statusCodes"] == {"200": 3, "404": 1}
    assert [r["endpoint"] for r in body["results"]] == ["/pets", "/pets", "/pets/{petId}", "/pets/{petId}"]
    assert len(transport.sent) == 4


def test_run_yaml_spec_content(client):
    content = """
openapi: 3.0.0
servers:
  - url: https://api.example.com/v1
paths:
  /pets:
    get:
      responses:
        '200':
          description: ok
"""
    response = client.post("/api/v1/oas/test", json={"spec_content": content})
    assert response.status_code == 200
    assert response.json()["summary"]["total"] == 1


def test_run_single_operation(client, petstore_spec):
    response = client.post(
        "/api/v1/oas/test", json={"spec": petstore_spec, "path": "/pets", "method": "post"}
    )
    assert response.status_code == 200
    results = response.json()["results"]
    assert len(results) == 1
    assert results[0]["method"] == "POST"


def test_missing_spec_is_400(client):
    response = client.post("/api/v1/oas/test", json={})
    assert response.status_code == 400
    assert "required" in response.json()["detail"]


def test_invalid_spec_is_400(client):
    response = client.post("/api/v1/oas/test", json={"spec": {"openapi": "3.0.0"}})
    assert response.status_code == 400
    assert "paths" in response.json()["detail"]


def test_bad_spec_url_is_400(client):
    response = client.post("/api/v1/oas/test", json={"oas_url": "ftp://example.com/spec.yaml"})
    assert response.status_code == 400


def test_run_with_named_auth_config(client, petstore_spec, transport):
    saved = client.post(
        "/api/v1/auth-configs", json={"name": "prod", "config": {"type": "bearer", "token": "prod-token-123"}}
    )
    assert saved.status_code == 200
    assert saved.json()["config"]["token"] == "prod..."

    response = client.post("/api/v1/oas/test", json={"spec": petstore_spec, "auth_config_name": "prod"})
    assert response.status_code == 200
    assert all(sent["headers"] == {"Authorization": "Bearer prod-token-123"} for sent in transport.sent)


def test_unknown_auth_config_name_is_404(client, petstore_spec):
    response = client.post("/api/v1/oas/test", json={"spec": petstore_spec, "auth_config_name": "nope"})
    assert response.status_code == 404


def test_auth_config_crud(client):
    created = client.post(
        "/api/v1/auth-configs",
        json={"name": "basic", "config": {"type": "basic", "username": "alice", "password": "secret"}},
    )
    assert created.status_code == 200

    listed = client.get("/api/v1/auth-configs").json()["auth_configs"]
    assert [entry["name"] for entry in listed] == ["basic"]
    assert listed[0]["config"]["password"] == "********"

    fetched = client.get("/api/v1/auth-configs/basic")
    assert fetched.status_code == 200
    assert fetched.json()["config"]["username"] == "alice"

    assert client.delete("/api/v1/auth-configs/basic").status_code == 200
    assert client.get("/api/v1/auth-configs/basic").status_code == 404
    assert client.delete("/api/v1/auth-configs/basic").status_code == 404


def test_invalid_auth_config_is_422(client):
    response = client.post("/api/v1/auth-configs", json={"name": "bad", "config": {"type": "apiKey", "value": "v"}})
    assert response.status_code == 422
    assert "header" in response.json()["detail"]


def test_retry_updates_result_set(client, petstore_spec):
    run = client.post("/api/v1/oas/test", json={"spec": petstore_spec}).json()
    failed = run["results"][2]
    assert failed["success"] is False

    retried_transport = FakeTransport()
    app.dependency_overrides[get_transport] = lambda: retried_transport
    response = client.post("/api/v1/oas/retry", json={
        "url": failed["request"]["url"],
        "method": failed["method"],
        "endpoint": failed["endpoint"],
        "results": run["results"],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["success"] is True
    assert body["results"][2]["success"] is True
    assert body["summary"]["failed"] == 0
    assert retried_transport.sent[0]["url"] == f"{BASE}/pets/sample-petId"


def test_retry_without_results(client, transport):
    response = client.post("/api/v1/oas/retry", json={
        "url": f"{BASE}/pets/sample-petId",
        "method": "GET",
        "auth_config": {"type": "apiKey", "header": "X-Key", "value": "k"},
    })
    body = response.json()
    assert response.status_code == 200
    assert body["result"]["success"] is False
    assert body["result"]["statusCode"] == 404
    assert body["results"] is None
    assert body["summary"]["total"] == 1
    assert transport.sent[0]["headers"] == {"X-Key": "k"}


def test_run_with_null_summary_completes(client):
    content = """
openapi: 3.0.0
servers:
  - url: https://api.example.com/v1
paths:
  /pets:
    get:
      summary:
      responses:
        '200':
          description: ok
"""
    response = client.post("/api/v1/oas/test", json={"spec_content": content})
    assert response.status_code == 200
    assert response.json()["summary"]["success"] == 1


def test_auth_store_created_once_without_lifespan():
    """Concurrent first requests share one lazily created store."""
    bare = FastAPI()
    request = Request({"type": "http", "app": bare})

    with ThreadPoolExecutor(max_workers=8) as pool:
        stores = list(pool.map(lambda _: get_auth_store(request), range(32)))

    assert all(store is stores[0] for store in stores)
    assert bare.state.auth_store is stores[0]
