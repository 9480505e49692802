"""Tests for the credential-gated counter endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import OWNER


def _issue_to_owner(client: TestClient, issuer_headers: dict[str, str]) -> None:
    resp = client.post(
        "/v1/credentials",
        json={"owner": OWNER, "token_id": 0},
        headers=issuer_headers,
    )
    assert resp.status_code == 201


def test_count_is_public_and_starts_at_zero(client: TestClient) -> None:
    resp = client.get("/v1/gate/count")
    assert resp.status_code == 200
    assert resp.json() == {"count": 0}


def test_holder_increments(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> None:
    _issue_to_owner(client, issuer_headers)
    resp = client.post("/v1/gate/increment", headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json() == {"count": 1}
    assert client.get("/v1/gate/count").json() == {"count": 1}


def test_non_holder_gets_403_no_kyc_and_count_unchanged(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
    other_headers: dict[str, str],
) -> None:
    _issue_to_owner(client, issuer_headers)
    client.post("/v1/gate/increment", headers=owner_headers)

    resp = client.post("/v1/gate/increment", headers=other_headers)
    assert resp.status_code == 403
    assert resp.json() == {"detail": "No KYC"}
    assert client.get("/v1/gate/count").json() == {"count": 1}


def test_increment_requires_token(client: TestClient) -> None:
    assert client.post("/v1/gate/increment").status_code == 401


def test_gate_closes_after_revoke(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> None:
    _issue_to_owner(client, issuer_headers)
    assert client.post("/v1/gate/increment", headers=owner_headers).status_code == 200
    client.post("/v1/credentials/0/revoke", headers=issuer_headers)
    assert client.post("/v1/gate/increment", headers=owner_headers).status_code == 403
    assert client.get("/v1/gate/count").json() == {"count": 1}


def test_gate_closes_after_burn(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> None:
    _issue_to_owner(client, issuer_headers)
    client.delete("/v1/credentials/0", headers=owner_headers)
    assert client.post("/v1/gate/increment", headers=owner_headers).status_code == 403
