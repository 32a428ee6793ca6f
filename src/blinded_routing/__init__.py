"""blinded-routing — DID exchange handshake and mediator route registration.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick start
-----------
::

    from blinded_routing import InMemoryMessenger, MessageRegistrar, build_routing_service

    messenger = InMemoryMessenger()
    registrar = MessageRegistrar()
    service = build_routing_service(messenger=messenger, registrar=registrar)
    # the transport now calls registrar.route(DIDCommMessage(...)) per inbound message
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------
from blinded_routing.did import (
    DIDDocument,
    DIDDocumentError,
    PeerDIDProvider,
    ServiceEndpoint,
    VDRRegistry,
)

# ------------------------------------------------------------------
# Storage
# ------------------------------------------------------------------
from blinded_routing.storage import (
    KeyNotFoundError,
    MemoryStorageProvider,
    SQLiteStorageProvider,
    StorageError,
    StorageProvider,
)

# ------------------------------------------------------------------
# Collaborators
# ------------------------------------------------------------------
from blinded_routing.connections import (
    DIDExchangeClient,
    InMemoryDIDExchange,
    InMemoryMediator,
    MediatorClient,
)
from blinded_routing.db import RelyingParties, RelyingParty

# ------------------------------------------------------------------
# Messaging
# ------------------------------------------------------------------
from blinded_routing.messaging import (
    ConnRequest,
    ConnResponse,
    DIDCommMessage,
    DIDDocResponse,
    ErrorResponse,
    InMemoryMessenger,
    MessageRegistrar,
    Messenger,
    ReplayPolicy,
    RoutingError,
    RoutingService,
)

# ------------------------------------------------------------------
# Wiring
# ------------------------------------------------------------------
from blinded_routing.bootstrap import build_routing_service
from blinded_routing.config import RoutingSettings

__all__ = [
    "__version__",
    # identity
    "DIDDocument",
    "DIDDocumentError",
    "PeerDIDProvider",
    "ServiceEndpoint",
    "VDRRegistry",
    # storage
    "KeyNotFoundError",
    "MemoryStorageProvider",
    "SQLiteStorageProvider",
    "StorageError",
    "StorageProvider",
    # collaborators
    "DIDExchangeClient",
    "InMemoryDIDExchange",
    "InMemoryMediator",
    "MediatorClient",
    "RelyingParties",
    "RelyingParty",
    # messaging
    "ConnRequest",
    "ConnResponse",
    "DIDCommMessage",
    "DIDDocResponse",
    "ErrorResponse",
    "InMemoryMessenger",
    "MessageRegistrar",
    "Messenger",
    "ReplayPolicy",
    "RoutingError",
    "RoutingService",
    # wiring
    "RoutingSettings",
    "build_routing_service",
]
