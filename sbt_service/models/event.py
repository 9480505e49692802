from __future__ import annotations

from dataclasses import dataclass

from sbt_service.models.credential import BurnAuth


@dataclass(frozen=True, slots=True)
class RegistryEvent:
    """One entry in the registry's append-only event log.

    kind: Issued|Locked|Revoked|Burned
    """

    kind: str
    token_id: int
    from_: str | None = None
    to: str | None = None
    burn_auth: BurnAuth | None = None
