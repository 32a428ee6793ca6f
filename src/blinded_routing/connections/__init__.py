"""blinded_routing.connections — connection and mediator collaborators."""
from __future__ import annotations

from blinded_routing.connections.didexchange import (
    ConnectionRecord,
    DIDExchangeClient,
    DIDExchangeError,
    InMemoryDIDExchange,
)
from blinded_routing.connections.mediator import (
    InMemoryMediator,
    MediatorClient,
    MediatorError,
)

__all__ = [
    "ConnectionRecord",
    "DIDExchangeClient",
    "DIDExchangeError",
    "InMemoryDIDExchange",
    "InMemoryMediator",
    "MediatorClient",
    "MediatorError",
]
