"""Soulbound credential registry.

One credential per identity, one owner per credential id, and no way for
a credential to change hands.  Credentials come into existence through
issue() and leave through revoke() or burn(); nothing else mutates state.

Every check runs before any write, so a failed call leaves the registry
exactly as it was.  The repo itself validates both of its indexes before
writing either, so the two can never disagree.

Caller identities are plain strings (the JWT subject at the HTTP layer).
Authorization is an equality test against the fixed issuer or the
current owner, not a role lookup.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from typing import NoReturn

from sbt_service.core.metrics import CREDENTIAL_OPERATIONS, TRANSFER_REJECTIONS
from sbt_service.models.credential import BurnAuth, Credential
from sbt_service.models.event import RegistryEvent
from sbt_service.repos.credential_repo import CredentialRepo

logger = logging.getLogger(__name__)

# ERC-5192 "minimal soulbound" interface id.  The only capability tag this
# registry reports as supported.
LOCKING_CAPABILITY_ID = "0xb45a3c0e"

# Oldest events are dropped once the log is full.
DEFAULT_MAX_EVENTS = 10_000


class CredentialError(Exception):
    code = "CREDENTIAL_ERROR"


class DuplicateOwnerError(CredentialError):
    code = "MNT01"


class DuplicateIdError(CredentialError):
    code = "MNT02"


class CredentialNotFoundError(CredentialError):
    code = "NOT_FOUND"


class UnauthorizedError(CredentialError):
    code = "UNAUTHORIZED"


class CredentialLockedError(CredentialError):
    code = "LOCKED"


class CredentialRegistry:
    def __init__(
        self,
        repo: CredentialRepo,
        *,
        issuer: str,
        base_uri: str,
        name: str = "SBT",
        symbol: str = "SBT",
        kyc_level: int = 1,
        max_events: int = DEFAULT_MAX_EVENTS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._repo = repo
        self._issuer = issuer
        self._base_uri = base_uri
        self._name = name
        self._symbol = symbol
        self._kyc_level = kyc_level
        self._clock = clock
        self._events: deque[RegistryEvent] = deque(maxlen=max_events)

    @property
    def issuer(self) -> str:
        return self._issuer

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def kyc_level(self) -> int:
        return self._kyc_level

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def issue(self, caller: str, owner: str, token_id: int) -> Credential:
        """Mint a locked credential for `owner`. Issuer only.

        Raises UnauthorizedError, DuplicateOwnerError (MNT01) or
        DuplicateIdError (MNT02), checked in that order.
        """
        if caller != self._issuer:
            self._reject("issue", UnauthorizedError, caller, token_id)
        if self._repo.get_by_owner(owner) is not None:
            self._reject("issue", DuplicateOwnerError, caller, token_id)
        if self._repo.get_by_id(token_id) is not None or self._repo.is_retired(
            token_id
        ):
            self._reject("issue", DuplicateIdError, caller, token_id)

        credential = Credential.new(
            token_id=token_id,
            owner=owner,
            issuer=self._issuer,
            base_uri=self._base_uri,
            issued_at=int(self._clock()),
        )
        self._repo.add(credential)

        self._events.append(
            RegistryEvent(
                kind="Issued",
                token_id=token_id,
                from_=self._issuer,
                to=owner,
                burn_auth=credential.burn_auth,
            )
        )
        self._events.append(RegistryEvent(kind="Locked", token_id=token_id))
        CREDENTIAL_OPERATIONS.labels(operation="issue", result="ok").inc()
        logger.info(
            "Issued credential token_id=%d owner=%s",
            token_id,
            owner,
            extra={"token_id": token_id, "caller": caller},
        )
        return credential

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, token_id: int) -> Credential:
        credential = self._repo.get_by_id(token_id)
        if credential is None:
            raise CredentialNotFoundError(_MESSAGES[CredentialNotFoundError])
        return credential

    def owner_of(self, token_id: int) -> str:
        return self.get(token_id).owner

    def balance_of(self, identity: str) -> int:
        return 0 if self._repo.get_by_owner(identity) is None else 1

    def locked(self, token_id: int) -> bool:
        return self.get(token_id).locked

    def burn_auth(self, token_id: int) -> BurnAuth:
        return self.get(token_id).burn_auth

    def token_uri(self, token_id: int) -> str:
        return self.get(token_id).uri

    def total_supply(self) -> int:
        return self._repo.count()

    def supports_interface(self, tag: str) -> bool:
        """Capability introspection. True only for the soulbound tag."""
        return tag.strip().lower() == LOCKING_CAPABILITY_ID

    def events(self, token_id: int | None = None) -> list[RegistryEvent]:
        if token_id is None:
            return list(self._events)
        return [e for e in self._events if e.token_id == token_id]

    # ------------------------------------------------------------------
    # Transfer family: always rejected, never touches the repo
    # ------------------------------------------------------------------

    def transfer_from(self, from_: str, to: str, token_id: int) -> NoReturn:
        self._reject_transfer("transfer_from", from_, to, token_id)

    def safe_transfer_from(
        self, from_: str, to: str, token_id: int, data: bytes = b""
    ) -> NoReturn:
        self._reject_transfer("safe_transfer_from", from_, to, token_id)

    def _reject_transfer(
        self, variant: str, from_: str, to: str, token_id: int
    ) -> NoReturn:
        TRANSFER_REJECTIONS.labels(variant=variant).inc()
        logger.warning(
            "Rejected %s token_id=%d from=%s to=%s: credential is locked",
            variant,
            token_id,
            from_,
            to,
            extra={"token_id": token_id},
        )
        raise CredentialLockedError(_MESSAGES[CredentialLockedError])

    # ------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------

    def revoke(self, caller: str, token_id: int) -> None:
        """Destroy a credential. Issuer only."""
        if caller != self._issuer:
            self._reject("revoke", UnauthorizedError, caller, token_id)
        if self._repo.get_by_id(token_id) is None:
            self._reject("revoke", CredentialNotFoundError, caller, token_id)
        self._destroy("revoke", "Revoked", caller, token_id)

    def burn(self, caller: str, token_id: int) -> None:
        """Destroy a credential if its BurnAuth permits `caller`.

        ISSUER_ONLY: issuer.  OWNER_ONLY: current owner.  BOTH: either.
        NEITHER: nobody.
        """
        credential = self._repo.get_by_id(token_id)
        if credential is None:
            self._reject("burn", CredentialNotFoundError, caller, token_id)
        if not _may_burn(credential, caller):
            self._reject("burn", UnauthorizedError, caller, token_id)
        self._destroy("burn", "Burned", caller, token_id)

    def _destroy(self, operation: str, kind: str, caller: str, token_id: int) -> None:
        removed = self._repo.remove(token_id)
        owner = removed.owner if removed is not None else None
        self._events.append(RegistryEvent(kind=kind, token_id=token_id, from_=owner))
        CREDENTIAL_OPERATIONS.labels(operation=operation, result="ok").inc()
        logger.info(
            "%s credential token_id=%d owner=%s",
            kind,
            token_id,
            owner,
            extra={"token_id": token_id, "caller": caller},
        )

    def _reject(
        self,
        operation: str,
        error: type[CredentialError],
        caller: str,
        token_id: int,
    ) -> NoReturn:
        reason = _MESSAGES[error]
        CREDENTIAL_OPERATIONS.labels(operation=operation, result=error.code).inc()
        logger.warning(
            "Rejected %s token_id=%d caller=%s: %s",
            operation,
            token_id,
            caller,
            reason,
            extra={"token_id": token_id, "caller": caller},
        )
        raise error(reason)


_MESSAGES: dict[type[CredentialError], str] = {
    DuplicateOwnerError: "owner already holds a credential",
    DuplicateIdError: "token id already issued",
    CredentialNotFoundError: "credential not found",
    UnauthorizedError: "caller is not authorized",
    CredentialLockedError: "credential is locked",
}


def _may_burn(credential: Credential, caller: str) -> bool:
    if credential.burn_auth == BurnAuth.ISSUER_ONLY:
        return caller == credential.issuer
    if credential.burn_auth == BurnAuth.OWNER_ONLY:
        return caller == credential.owner
    if credential.burn_auth == BurnAuth.BOTH:
        return caller in (credential.issuer, credential.owner)
    return False
