from __future__ import annotations

from typing import Protocol

from sbt_service.models.credential import Credential


class CredentialRepo(Protocol):
    def get_by_id(self, token_id: int) -> Credential | None: ...
    def get_by_owner(self, owner: str) -> Credential | None: ...
    def is_retired(self, token_id: int) -> bool: ...
    def add(self, credential: Credential) -> None: ...
    def remove(self, token_id: int) -> Credential | None: ...
    def count(self) -> int: ...


class InMemoryCredentialRepo:
    """Two indexes kept in lockstep: id -> credential and owner -> id.

    There is no update or move operation. A credential enters
    through add() and leaves through remove(); ownership cannot change in
    between. Removed ids are retired and never accepted again.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, Credential] = {}
        self._by_owner: dict[str, int] = {}
        self._retired: set[int] = set()

    def get_by_id(self, token_id: int) -> Credential | None:
        return self._by_id.get(token_id)

    def get_by_owner(self, owner: str) -> Credential | None:
        token_id = self._by_owner.get(owner)
        if token_id is None:
            return None
        return self._by_id[token_id]

    def is_retired(self, token_id: int) -> bool:
        return token_id in self._retired

    def add(self, credential: Credential) -> None:
        # Validate both keys before touching either index.
        if credential.owner in self._by_owner:
            raise ValueError("owner already holds a credential")
        if credential.id in self._by_id or credential.id in self._retired:
            raise ValueError("token id already used")
        self._by_id[credential.id] = credential
        self._by_owner[credential.owner] = credential.id

    def remove(self, token_id: int) -> Credential | None:
        credential = self._by_id.pop(token_id, None)
        if credential is None:
            return None
        del self._by_owner[credential.owner]
        self._retired.add(token_id)
        return credential

    def count(self) -> int:
        return len(self._by_id)
