"""Demo: issue a credential, use the gate, then revoke, via TestClient.

Run with:
    python scripts/demo_kyc_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from sbt_service.api.credentials import registry
from sbt_service.main import app
from sbt_service.services import token_service

HOLDER = "0xholder"
STRANGER = "0xstranger"


def _auth(identity: str) -> dict[str, str]:
    token = token_service.create_access_token(sub=identity)
    return {"Authorization": f"Bearer {token}"}


def main() -> None:
    client = TestClient(app)
    issuer = _auth(registry.issuer)
    holder = _auth(HOLDER)
    stranger = _auth(STRANGER)

    # ── Step 1: issue token 0 to the holder ─────────────────────────
    body = {"owner": HOLDER, "token_id": 0}
    r = client.post("/v1/credentials", json=body, headers=issuer)
    print(f"1. POST /v1/credentials         → {r.status_code}  {r.json()['uri']}")

    # ── Step 2: second credential for the same holder ───────────────
    body = {"owner": HOLDER, "token_id": 1}
    r = client.post("/v1/credentials", json=body, headers=issuer)
    print(f"2. POST /v1/credentials (again) → {r.status_code}  {r.json()['detail']}")

    # ── Step 3: try to move it ──────────────────────────────────────
    body = {"from": HOLDER, "to": STRANGER}
    r = client.post("/v1/credentials/0/transfer", json=body, headers=holder)
    print(f"3. POST .../0/transfer          → {r.status_code}  (locked)")

    # ── Step 4: gate, with and without a credential ─────────────────
    r = client.post("/v1/gate/increment", headers=holder)
    print(f"4. POST /v1/gate/increment      → {r.status_code}  {r.json()}")
    r = client.post("/v1/gate/increment", headers=stranger)
    print(f"5. POST /v1/gate/increment      → {r.status_code}  {r.json()}")

    # ── Step 5: revoke, then the gate closes ────────────────────────
    r = client.post("/v1/credentials/0/revoke", headers=issuer)
    print(f"6. POST .../0/revoke            → {r.status_code}")
    r = client.post("/v1/gate/increment", headers=holder)
    print(f"7. POST /v1/gate/increment      → {r.status_code}  {r.json()}")

    r = client.get("/v1/gate/count")
    print(f"8. GET  /v1/gate/count          → {r.status_code}  {r.json()}")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
