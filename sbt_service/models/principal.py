from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated JWT.

    Carried through the request via FastAPI's dependency system.
    `identity` is the opaque account key (the JWT subject) that the
    registry compares against its issuer and credential owners.
    """

    identity: str
