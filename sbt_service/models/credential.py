from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BurnAuth(IntEnum):
    """Who may destroy a credential. Values match the ERC-5484 ordering."""

    ISSUER_ONLY = 0
    OWNER_ONLY = 1
    BOTH = 2
    NEITHER = 3


@dataclass(frozen=True, slots=True)
class Credential:
    """Issued soulbound credential, bound to exactly one owner for its lifetime."""

    id: int
    owner: str
    issuer: str
    uri: str
    burn_auth: BurnAuth = BurnAuth.BOTH
    issued_at: int = 0

    @property
    def locked(self) -> bool:
        # There is no unlocked state.
        return True

    @staticmethod
    def new(
        *,
        token_id: int,
        owner: str,
        issuer: str,
        base_uri: str,
        issued_at: int,
    ) -> Credential:
        return Credential(
            id=token_id,
            owner=owner,
            issuer=issuer,
            uri=f"{base_uri}{token_id}",
            issued_at=issued_at,
        )
