"""Tests for the credential registry endpoints."""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from tests.conftest import OTHER, OWNER, auth


def _issue(
    client: TestClient, headers: dict[str, str], owner: str = OWNER, token_id: int = 0
):
    return client.post(
        "/v1/credentials", json={"owner": owner, "token_id": token_id}, headers=headers
    )


# ---- issue ----


def test_issue_returns_201_and_credential(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    resp = _issue(client, issuer_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == 0
    assert body["owner"] == OWNER
    assert body["uri"] == "http://localhost/0"
    assert body["burn_auth"] == 2
    assert body["burn_auth_name"] == "BOTH"
    assert body["locked"] is True


def test_issue_rejects_missing_token(client: TestClient) -> None:
    resp = client.post("/v1/credentials", json={"owner": OWNER, "token_id": 0})
    assert resp.status_code == 401


def test_issue_rejects_invalid_token(client: TestClient) -> None:
    resp = client.post(
        "/v1/credentials",
        json={"owner": OWNER, "token_id": 0},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401


def test_issue_by_non_issuer_is_403(
    client: TestClient, owner_headers: dict[str, str]
) -> None:
    resp = _issue(client, owner_headers)
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "UNAUTHORIZED"


def test_issue_twice_to_same_owner_is_409_mnt01(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    resp = _issue(client, issuer_headers, token_id=1)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "MNT01"


def test_issue_same_id_to_other_owner_is_409_mnt02(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    resp = _issue(client, issuer_headers, owner=OTHER)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "MNT02"


@pytest.mark.parametrize(
    "body",
    [
        {"owner": OWNER},
        {"token_id": 0},
        {"owner": "", "token_id": 0},
        {"owner": OWNER, "token_id": -1},
    ],
)
def test_issue_rejects_malformed_body(
    client: TestClient, issuer_headers: dict[str, str], body: dict
) -> None:
    resp = client.post("/v1/credentials", json=body, headers=issuer_headers)
    assert resp.status_code == 422


# ---- queries ----


def test_balance_is_public_and_zero_or_one(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    assert client.get(f"/v1/owners/{OWNER}/balance").json() == {
        "identity": OWNER,
        "balance": 1,
    }
    assert client.get(f"/v1/owners/{OTHER}/balance").json()["balance"] == 0


def test_owner_uri_locked_and_burn_auth(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    assert client.get("/v1/credentials/0/owner").json()["owner"] == OWNER
    assert client.get("/v1/credentials/0/uri").json()["uri"] == "http://localhost/0"
    assert client.get("/v1/credentials/0/locked").json()["locked"] is True
    assert client.get("/v1/credentials/0/burn-auth").json() == {
        "token_id": 0,
        "burn_auth": 2,
        "name": "BOTH",
    }


@pytest.mark.parametrize(
    "path",
    [
        "/v1/credentials/1",
        "/v1/credentials/1/owner",
        "/v1/credentials/1/uri",
        "/v1/credentials/1/locked",
        "/v1/credentials/1/burn-auth",
    ],
)
def test_queries_on_unknown_id_are_404(client: TestClient, path: str) -> None:
    resp = client.get(path)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND"


def test_non_integer_id_is_422(client: TestClient) -> None:
    assert client.get("/v1/credentials/abc/owner").status_code == 422


# ---- capability / registry ----


def test_capability_tag(client: TestClient) -> None:
    assert client.get("/v1/capabilities/0xb45a3c0e").json() == {
        "tag": "0xb45a3c0e",
        "supported": True,
    }
    assert client.get("/v1/capabilities/0x80ac58cd").json()["supported"] is False


def test_registry_metadata(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    body = client.get("/v1/registry").json()
    assert body["name"] == "SBT"
    assert body["symbol"] == "SBT"
    assert body["base_uri"] == "http://localhost/"
    assert body["kyc_level"] == 1
    assert body["total_supply"] == 1


def test_event_log(client: TestClient, issuer_headers: dict[str, str]) -> None:
    _issue(client, issuer_headers)
    client.post("/v1/credentials/0/revoke", headers=issuer_headers)
    events = client.get("/v1/registry/events", params={"token_id": 0}).json()
    assert [e["kind"] for e in events] == ["Issued", "Locked", "Revoked"]
    assert events[0]["to"] == OWNER
    assert events[0]["burn_auth"] == 2
    assert events[2]["from"] == OWNER


# ---- transfer ----


@pytest.mark.parametrize(
    "body",
    [
        {"from": OWNER, "to": OTHER},
        {"from": OWNER, "to": OTHER, "data": ""},
        {"from": OWNER, "to": OTHER, "data": "0xdeadbeef"},
        {"from": OTHER, "to": OWNER},
    ],
)
def test_transfer_is_always_423(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
    body: dict,
) -> None:
    _issue(client, issuer_headers)
    resp = client.post("/v1/credentials/0/transfer", json=body, headers=owner_headers)
    assert resp.status_code == 423
    assert resp.json()["detail"]["code"] == "LOCKED"
    assert client.get("/v1/credentials/0/owner").json()["owner"] == OWNER
    assert client.get(f"/v1/owners/{OTHER}/balance").json()["balance"] == 0


def test_transfer_by_issuer_is_423(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    resp = client.post(
        "/v1/credentials/0/transfer",
        json={"from": OWNER, "to": OTHER},
        headers=issuer_headers,
    )
    assert resp.status_code == 423


def test_transfer_with_non_hex_data_is_423(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> None:
    _issue(client, issuer_headers)
    resp = client.post(
        "/v1/credentials/0/transfer",
        json={"from": OWNER, "to": OTHER, "data": "zz"},
        headers=owner_headers,
    )
    assert resp.status_code == 423
    assert resp.json()["detail"]["code"] == "LOCKED"


@pytest.mark.parametrize(
    "body",
    [
        {"from": OWNER, "to": OTHER},
        {"from": OWNER, "to": OTHER, "data": "zz"},
    ],
)
def test_transfer_without_token_is_423(
    client: TestClient, issuer_headers: dict[str, str], body: dict
) -> None:
    _issue(client, issuer_headers)
    resp = client.post("/v1/credentials/0/transfer", json=body)
    assert resp.status_code == 423
    assert client.get("/v1/credentials/0/owner").json()["owner"] == OWNER


def test_transfer_of_unknown_id_without_token_is_423(client: TestClient) -> None:
    resp = client.post(
        "/v1/credentials/99/transfer", json={"from": OWNER, "to": OTHER}
    )
    assert resp.status_code == 423


# ---- revoke / burn ----


def test_revoke_by_issuer(client: TestClient, issuer_headers: dict[str, str]) -> None:
    _issue(client, issuer_headers)
    resp = client.post("/v1/credentials/0/revoke", headers=issuer_headers)
    assert resp.status_code == 204
    assert client.get(f"/v1/owners/{OWNER}/balance").json()["balance"] == 0
    assert client.get("/v1/credentials/0/burn-auth").status_code == 404


def test_revoke_by_owner_is_403(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> None:
    _issue(client, issuer_headers)
    resp = client.post("/v1/credentials/0/revoke", headers=owner_headers)
    assert resp.status_code == 403
    assert client.get("/v1/credentials/0/owner").status_code == 200


def test_revoke_unknown_is_404(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    resp = client.post("/v1/credentials/3/revoke", headers=issuer_headers)
    assert resp.status_code == 404


def test_burn_by_owner(
    client: TestClient,
    issuer_headers: dict[str, str],
    owner_headers: dict[str, str],
) -> None:
    _issue(client, issuer_headers)
    resp = client.delete("/v1/credentials/0", headers=owner_headers)
    assert resp.status_code == 204
    assert client.get(f"/v1/owners/{OWNER}/balance").json()["balance"] == 0
    # Already burned: the issuer now gets 404, not 403.
    assert client.delete("/v1/credentials/0", headers=issuer_headers).status_code == 404


def test_burn_by_issuer(client: TestClient, issuer_headers: dict[str, str]) -> None:
    _issue(client, issuer_headers)
    assert client.delete("/v1/credentials/0", headers=issuer_headers).status_code == 204


def test_burn_by_stranger_is_403(
    client: TestClient,
    issuer_headers: dict[str, str],
    other_headers: dict[str, str],
) -> None:
    _issue(client, issuer_headers)
    assert client.delete("/v1/credentials/0", headers=other_headers).status_code == 403


def test_reissue_of_burned_id_is_409(
    client: TestClient, issuer_headers: dict[str, str]
) -> None:
    _issue(client, issuer_headers)
    client.delete("/v1/credentials/0", headers=auth(OWNER))
    resp = _issue(client, issuer_headers, owner=OTHER)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "MNT02"


# ---- logging ----


def test_rejection_log_carries_caller(
    client: TestClient,
    issuer_headers: dict[str, str],
    other_headers: dict[str, str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    _issue(client, issuer_headers)
    with caplog.at_level(
        logging.WARNING, logger="sbt_service.services.credential_registry"
    ):
        client.delete("/v1/credentials/0", headers=other_headers)
    rejected = [r for r in caplog.records if "Rejected burn" in r.getMessage()]
    assert len(rejected) == 1
    assert rejected[0].caller == OTHER  # type: ignore[attr-defined]
