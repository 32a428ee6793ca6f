"""Mediator component — accepts route registrations for connections."""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)


class MediatorError(Exception):
    """Raised when a route registration is refused."""


class MediatorClient(ABC):
    """Registers routing for an established connection."""

    @abstractmethod
    def register(self, connection_id: str) -> None:
        """Register routing for *connection_id*.

        Raises
        ------
        MediatorError
            If the mediator refuses the registration.
        """


class InMemoryMediator(MediatorClient):
    """Records every registration; repeated registrations are kept.

    Parameters
    ----------
    connection_exists:
        Optional predicate used to reject unknown connection ids.
    """

    def __init__(self, connection_exists: Callable[[str], bool] | None = None) -> None:
        self._connection_exists = connection_exists
        self._registrations: list[str] = []
        self._lock = threading.Lock()

    def register(self, connection_id: str) -> None:
        if not connection_id:
            raise MediatorError("connection id is mandatory")
        if self._connection_exists is not None and not self._connection_exists(connection_id):
            raise MediatorError(f"connection {connection_id} not found")
        with self._lock:
            self._registrations.append(connection_id)
        logger.debug("Registered route for connection %s", connection_id)

    @property
    def registrations(self) -> list[str]:
        """Connection ids in registration order."""
        with self._lock:
            return list(self._registrations)


__all__ = ["InMemoryMediator", "MediatorClient", "MediatorError"]
