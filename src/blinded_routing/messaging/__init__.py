"""blinded_routing.messaging — the handshake service and its wire models.

Submodules
----------
types
    Message type tags and the request -> response mapping.
models
    Pydantic payload models and the inbound DIDCommMessage view.
errors
    Handler error taxonomy.
transport
    Messenger contract, InMemoryMessenger and MessageRegistrar.
service
    RoutingService: inbox, worker thread and handshake handlers.
"""
from __future__ import annotations

from blinded_routing.messaging.errors import (
    ConnectionCreationError,
    DecodeError,
    IdentityCreationError,
    MediationError,
    NotFoundError,
    ParseError,
    ReplayError,
    ReplyDeliveryError,
    RoutingError,
    SerializationError,
    ServiceClosedError,
    StoreError,
    UnsupportedMessageError,
    ValidationError,
)
from blinded_routing.messaging.models import (
    ConnRequest,
    ConnResponse,
    DIDCommMessage,
    DIDDocData,
    DIDDocRequest,
    DIDDocResponse,
    ErrorData,
    ErrorResponse,
)
from blinded_routing.messaging.service import (
    PEER_DID_METHOD,
    ROUTED_STORE_SUFFIX,
    TXN_STORE_NAME,
    ReplayPolicy,
    RoutingService,
)
from blinded_routing.messaging.transport import (
    InMemoryMessenger,
    MessageRegistrar,
    MessageService,
    Messenger,
    RegistrationError,
)
from blinded_routing.messaging.types import (
    DIDDOC_REQ,
    DIDDOC_RESP,
    MSG_TYPE_BASE_URI,
    REGISTER_ROUTE_REQ,
    REGISTER_ROUTE_RESP,
    MessageKind,
    response_type_for,
)

__all__ = [
    # types
    "DIDDOC_REQ",
    "DIDDOC_RESP",
    "MSG_TYPE_BASE_URI",
    "MessageKind",
    "REGISTER_ROUTE_REQ",
    "REGISTER_ROUTE_RESP",
    "response_type_for",
    # models
    "ConnRequest",
    "ConnResponse",
    "DIDCommMessage",
    "DIDDocData",
    "DIDDocRequest",
    "DIDDocResponse",
    "ErrorData",
    "ErrorResponse",
    # errors
    "ConnectionCreationError",
    "DecodeError",
    "IdentityCreationError",
    "MediationError",
    "NotFoundError",
    "ParseError",
    "ReplayError",
    "ReplyDeliveryError",
    "RoutingError",
    "SerializationError",
    "ServiceClosedError",
    "StoreError",
    "UnsupportedMessageError",
    "ValidationError",
    # transport
    "InMemoryMessenger",
    "MessageRegistrar",
    "MessageService",
    "Messenger",
    "RegistrationError",
    # service
    "PEER_DID_METHOD",
    "ROUTED_STORE_SUFFIX",
    "ReplayPolicy",
    "RoutingService",
    "TXN_STORE_NAME",
]
