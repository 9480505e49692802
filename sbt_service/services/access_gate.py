from __future__ import annotations

import logging

from sbt_service.core.metrics import GATE_INCREMENTS
from sbt_service.services.credential_registry import CredentialRegistry

logger = logging.getLogger(__name__)


class NoCredentialError(Exception):
    def __init__(self) -> None:
        super().__init__("No KYC")


class AccessGate:
    """Shared counter that only credential holders may increment.

    The registry is consulted on every call, so revoking or burning a
    credential closes the gate for its former owner immediately.
    """

    def __init__(self, registry: CredentialRegistry) -> None:
        self._registry = registry
        self._count = 0

    def increment(self, caller: str) -> int:
        if self._registry.balance_of(caller) == 0:
            GATE_INCREMENTS.labels(result="no_credential").inc()
            logger.warning(
                "Rejected increment caller=%s: no credential",
                caller,
                extra={"caller": caller},
            )
            raise NoCredentialError()

        self._count += 1
        GATE_INCREMENTS.labels(result="ok").inc()
        logger.info("Counter incremented to %d by caller=%s", self._count, caller)
        return self._count

    def get_count(self) -> int:
        return self._count
