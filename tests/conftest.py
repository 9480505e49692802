from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sbt_service.api.credentials import credential_repo, registry
from sbt_service.api.gate import access_gate
from sbt_service.main import app
from sbt_service.services import token_service

OWNER = "0xowner"
OTHER = "0xother"
BASE_URI = "http://localhost/"


@pytest.fixture(autouse=True)
def reset_registry_state() -> None:
    """Clear the module-level registry, its event log and the gate counter."""
    credential_repo._by_id.clear()
    credential_repo._by_owner.clear()
    credential_repo._retired.clear()
    registry._events.clear()
    access_gate._count = 0


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(identity: str) -> str:
    """Create a valid ES256 JWT whose subject is `identity`."""
    return token_service.create_access_token(sub=identity)


def auth(identity: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(identity)}"}


@pytest.fixture
def issuer_headers() -> dict[str, str]:
    return auth(registry.issuer)


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return auth(OWNER)


@pytest.fixture
def other_headers() -> dict[str, str]:
    return auth(OTHER)
