"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from festivals.domain import Principal, Role
from festivals.services.credentials import DjangoCredentialService
from festivals.services.tokens import SignedTokenService
from festivals.services.workflow_service import WorkflowService
from festivals.stores.memory_store import InMemoryEntityStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


# Workflow service over the in-memory store


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def service(store) -> WorkflowService:
    return WorkflowService(store, DjangoCredentialService(), SignedTokenService())


def principal_for(user) -> Principal:
    return Principal(identity=user.id, role=user.role)


@pytest.fixture
def make_principal(service):
    """Register a user and return the principal acting as them."""

    def _make(username: str, role: Role) -> Principal:
        user = service.register({"username": username, "password": "secret-pw", "role": role})
        return principal_for(user)

    return _make


@pytest.fixture
def organizer(make_principal) -> Principal:
    return make_principal("olga", Role.ORGANIZER)


@pytest.fixture
def artist(make_principal) -> Principal:
    return make_principal("arlo", Role.ARTIST)


@pytest.fixture
def other_artist(make_principal) -> Principal:
    return make_principal("bea", Role.ARTIST)


@pytest.fixture
def staff(make_principal) -> Principal:
    return make_principal("sam", Role.STAFF)


@pytest.fixture
def admin(make_principal) -> Principal:
    return make_principal("ada", Role.ADMIN)


# HTTP clients against the database


@pytest.fixture
def login_as(db):
    """Register a user over HTTP and return (authenticated client, user id)."""

    def _login(username: str, role: Role) -> tuple[APIClient, str]:
        client = APIClient()
        registered = client.post(
            "/api/users/register",
            {"username": username, "password": "secret-pw", "role": role.value},
        )
        assert registered.status_code == 201
        response = client.post("/api/users/login", {"username": username, "password": "secret-pw"})
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.json()['token']}")
        return client, registered.json()["id"]

    return _login
