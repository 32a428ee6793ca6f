"""Errors raised by the routing service handlers.

Every subclass of :class:`RoutingError` is turned into an error reply by
the dispatcher; its ``str()`` becomes the reply's ``errMsg``.
"""
from __future__ import annotations


class RoutingError(Exception):
    """Base class for handler failures reported back to the requester."""


class ValidationError(RoutingError):
    """A mandatory request field is missing or empty."""


class DecodeError(RoutingError):
    """The message payload does not decode into the expected model."""


class ParseError(RoutingError):
    """The carried DID document is not a structurally valid document."""


class NotFoundError(RoutingError):
    """The correlation id is unknown to the transaction store."""


class IdentityCreationError(RoutingError):
    """The identity component refused to create a DID."""


class ConnectionCreationError(RoutingError):
    """The connection component failed to create a connection."""


class MediationError(RoutingError):
    """The mediator refused the route registration."""


class StoreError(RoutingError):
    """The transaction store failed to persist or read data."""


class SerializationError(RoutingError):
    """A DID document could not be serialized."""


class UnsupportedMessageError(RoutingError):
    """The inbound message type has no handler."""

    def __init__(self, msg_type: str) -> None:
        super().__init__(f"unsupported message service type : {msg_type}")
        self.msg_type = msg_type


class ReplayError(RoutingError):
    """A route was already registered for the parent thread."""

    def __init__(self, parent_thread_id: str) -> None:
        super().__init__(f"route already registered for parent thread id {parent_thread_id}")
        self.parent_thread_id = parent_thread_id


class ReplyDeliveryError(Exception):
    """Sending a reply failed. Logged only; there is nobody to report to."""


class ServiceClosedError(RuntimeError):
    """A message was submitted after the routing service was closed."""


__all__ = [
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
]
