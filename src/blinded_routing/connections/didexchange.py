"""DID-exchange connection component.

:class:`DIDExchangeClient` is the contract the routing service depends on.
:class:`InMemoryDIDExchange` is the commodity implementation: it records one
completed :class:`ConnectionRecord` per call.
"""
from __future__ import annotations

import datetime
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from blinded_routing.did.document import DIDDocument


class DIDExchangeError(Exception):
    """Raised when a connection cannot be established."""


@dataclass(frozen=True)
class ConnectionRecord:
    """A connection between one of our DIDs and a remote DID."""

    connection_id: str
    my_did: str
    their_did: str
    their_endpoints: tuple[str, ...] = ()
    state: str = "completed"
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )


class DIDExchangeClient(ABC):
    """Creates connections from an exchanged DID document."""

    @abstractmethod
    def create_connection(self, my_did: str, their_doc: DIDDocument) -> str:
        """Create a connection and return its id.

        Raises
        ------
        DIDExchangeError
            If the connection cannot be created.
        """


class InMemoryDIDExchange(DIDExchangeClient):
    """Keeps connection records in process memory."""

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionRecord] = {}
        self._lock = threading.Lock()

    def create_connection(self, my_did: str, their_doc: DIDDocument) -> str:
        if not my_did:
            raise DIDExchangeError("my DID is mandatory")
        if my_did == their_doc.id:
            raise DIDExchangeError(f"cannot connect {my_did} to itself")

        record = ConnectionRecord(
            connection_id=str(uuid.uuid4()),
            my_did=my_did,
            their_did=their_doc.id,
            their_endpoints=tuple(their_doc.service_endpoints()),
        )
        with self._lock:
            self._connections[record.connection_id] = record
        return record.connection_id

    def get_connection(self, connection_id: str) -> ConnectionRecord:
        """Return a stored record.

        Raises
        ------
        KeyError
            If *connection_id* is unknown.
        """
        with self._lock:
            return self._connections[connection_id]

    def has_connection(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._connections

    def list_connections(self) -> list[ConnectionRecord]:
        with self._lock:
            return sorted(self._connections.values(), key=lambda r: r.created_at)


__all__ = [
    "ConnectionRecord",
    "DIDExchangeClient",
    "DIDExchangeError",
    "InMemoryDIDExchange",
]
