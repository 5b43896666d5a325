"""
Shared fixtures.
"""
import random

import pytest
from cryptography.fernet import Fernet

from oas_runner.core.config import Settings
from oas_runner.core.exceptions import TransportError
from oas_runner.services.auth_store import AuthConfigStore
from oas_runner.services.data_generator import SyntheticDataGenerator


class FakeTransport:
    """Records sent requests and answers from a (method, url) table."""

    def __init__(self, responses=None, default_status=200):
        self.responses = responses or {}
        self.default_status = default_status
        self.sent = []

    def send(self, method, url, headers=None, data=None):
        self.sent.append({'method': method, 'url': url, 'headers': dict(headers or {}), 'data': data})
        answer = self.responses.get((method, url), (self.default_status, {'ok': True}))
        if isinstance(answer, Exception):
            raise answer
        status, body = answer
        if not 200 <= status < 300:
            raise TransportError(f"Request failed with status code {status}", status, body)
        return {'status': status, 'data': body}


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def generator():
    return SyntheticDataGenerator(rng=random.Random(1234))


@pytest.fixture
def env_settings():
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        BEARER_TOKEN="env-bearer",
        DEFAULT_BEARER_TOKEN="env-default-bearer",
        API_KEY="env-api-key",
        BASIC_AUTH_USER="env-user",
        BASIC_AUTH_PASS="env-pass",
        OAUTH_TOKEN="env-oauth",
    )


@pytest.fixture
def auth_store():
    return AuthConfigStore(fernet=Fernet(Fernet.generate_key()))


@pytest.fixture
def petstore_spec():
    """A small OpenAPI 3 document covering refs, bodies and security."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Petstore", "version": "1.0.0"},
        "servers": [{"url": "https://api.example.com/v1"}],
        "security": [{"api_key": []}],
        "paths": {
            "/pets": {
                "get": {
                    "operationId": "listPets",
                    "parameters": [
                        {"name": "limit", "in": "query", "schema": {"type": "integer"}}
                    ],
                    "responses": {"200": {"description": "ok"}},
                },
                "post": {
                    "operationId": "createPet",
                    "requestBody": {
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                        }
                    },
                    "security": [{"petstore_auth": ["write:pets"]}],
                    "responses": {"201": {"description": "created"}},
                },
            },
            "/pets/{petId}": {
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}}
                ],
                "get": {
                    "operationId": "showPetById",
                    "security": [],
                    "responses": {"200": {"description": "ok"}},
                },
                "delete": {
                    "operationId": "deletePet",
                    "responses": {"204": {"description": "deleted"}},
                },
            },
        },
        "components": {
            "schemas": {
                "Pet": {
                    "type": "object",
                    "required": ["id", "name"],
                    "properties": {
                        "id": {"type": "integer", "minimum": 1, "maximum": 1000},
                        "name": {"type": "string"},
                        "tag": {"type": "string"},
                        "status": {"type": "string", "enum": ["available", "pending", "sold"]},
                    },
                }
            },
            "securitySchemes": {
                "api_key": {"type": "apiKey", "name": "X-Pet-Key", "in": "header"},
                "petstore_auth": {"type": "oauth2", "flows": {}},
            },
        },
    }
