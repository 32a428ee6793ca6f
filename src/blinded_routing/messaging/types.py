"""Message type tags of the blinded-routing protocol.

Every request kind maps to exactly one response type. Adding a protocol
step means adding a :class:`MessageKind` member and its response tag.
"""
from __future__ import annotations

from enum import Enum

MSG_TYPE_BASE_URI: str = "https://trustbloc.dev/blinded-routing/1.0"

DIDDOC_REQ: str = MSG_TYPE_BASE_URI + "/diddoc-req"
DIDDOC_RESP: str = MSG_TYPE_BASE_URI + "/diddoc-resp"
REGISTER_ROUTE_REQ: str = MSG_TYPE_BASE_URI + "/register-route-req"
REGISTER_ROUTE_RESP: str = MSG_TYPE_BASE_URI + "/register-route-resp"


class MessageKind(str, Enum):
    """Request kinds understood by the routing service."""

    DIDDOC_REQUEST = DIDDOC_REQ
    REGISTER_ROUTE_REQUEST = REGISTER_ROUTE_REQ
    UNSUPPORTED = "unsupported"

    @classmethod
    def classify(cls, msg_type: str) -> "MessageKind":
        """Return the kind for *msg_type*, ``UNSUPPORTED`` if unknown."""
        if msg_type == cls.UNSUPPORTED.value:
            return cls.UNSUPPORTED
        try:
            return cls(msg_type)
        except ValueError:
            return cls.UNSUPPORTED


RESPONSE_TYPES: dict[MessageKind, str] = {
    MessageKind.DIDDOC_REQUEST: DIDDOC_RESP,
    MessageKind.REGISTER_ROUTE_REQUEST: REGISTER_ROUTE_RESP,
}


def response_type_for(msg_type: str) -> str:
    """Return the response type paired with *msg_type*.

    Unsupported types are echoed back unchanged.
    """
    return RESPONSE_TYPES.get(MessageKind.classify(msg_type), msg_type)


__all__ = [
    "DIDDOC_REQ",
    "DIDDOC_RESP",
    "MSG_TYPE_BASE_URI",
    "MessageKind",
    "REGISTER_ROUTE_REQ",
    "REGISTER_ROUTE_RESP",
    "RESPONSE_TYPES",
    "response_type_for",
]
