"""Pydantic models for blinded-routing message payloads.

Outbound messages are frozen models serialized with their wire aliases
(``@id``, ``@type``, ``errMsg``). Byte fields travel as standard base64
strings.

Inbound messages arrive as plain JSON objects and are wrapped in
:class:`DIDCommMessage`, which exposes the envelope fields the service
reads and decodes the payload into one of the request models on demand.
"""
from __future__ import annotations

import base64
import binascii
import json
import uuid
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from blinded_routing.messaging.types import (
    DIDDOC_REQ,
    DIDDOC_RESP,
    REGISTER_ROUTE_REQ,
    REGISTER_ROUTE_RESP,
)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _new_id() -> str:
    return str(uuid.uuid4())


# ------------------------------------------------------------------
# Inbound envelope
# ------------------------------------------------------------------


class DIDCommMessage:
    """Read-only view over an inbound DIDComm message.

    Parameters
    ----------
    payload:
        The decoded JSON object as delivered by the transport.
    """

    def __init__(self, payload: Mapping[str, Any]) -> None:
        self._payload: dict[str, Any] = dict(payload)

    @classmethod
    def new(
        cls,
        msg_type: str,
        *,
        msg_id: str | None = None,
        parent_thread_id: str = "",
        **fields: Any,
    ) -> "DIDCommMessage":
        """Build a message, mainly for clients and tests."""
        payload: dict[str, Any] = {"@id": msg_id or _new_id(), "@type": msg_type}
        if parent_thread_id:
            payload["~thread"] = {"pthid": parent_thread_id}
        payload.update(fields)
        return cls(payload)

    @classmethod
    def from_json(cls, raw: bytes | str) -> "DIDCommMessage":
        """Parse a raw JSON message.

        Raises
        ------
        ValueError
            If *raw* is not a JSON object.
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"DIDComm message must be a JSON object, got {type(data).__name__}")
        return cls(data)

    @property
    def type(self) -> str:
        return str(self._payload.get("@type") or "")

    @property
    def id(self) -> str:
        return str(self._payload.get("@id") or "")

    @property
    def parent_thread_id(self) -> str:
        """The ``~thread.pthid`` decorator, empty when absent."""
        thread = self._payload.get("~thread")
        if not isinstance(thread, Mapping):
            return ""
        return str(thread.get("pthid") or "")

    def decode(self, model: type[_ModelT]) -> _ModelT:
        """Validate the payload against *model*.

        Raises
        ------
        pydantic.ValidationError
            If the payload does not fit the model.
        """
        return model.model_validate(self._payload)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._payload)

    def __repr__(self) -> str:
        return f"DIDCommMessage(type={self.type!r}, id={self.id!r})"


# ------------------------------------------------------------------
# Payload data
# ------------------------------------------------------------------


class DIDDocData(BaseModel):
    """``{"did_doc": <base64 document bytes>}``."""

    model_config = ConfigDict(frozen=True)

    did_doc: bytes | None = None

    @field_validator("did_doc", mode="before")
    @classmethod
    def decode_base64(cls, value: object) -> object:
        if value is None or isinstance(value, bytes):
            return value
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except binascii.Error as exc:
                raise ValueError(f"did_doc is not valid base64: {exc}") from exc
        raise ValueError(f"did_doc must be a base64 string, got {type(value).__name__}")

    @field_serializer("did_doc")
    def encode_base64(self, value: bytes | None) -> str | None:
        if value is None:
            return None
        return base64.b64encode(value).decode("ascii")


class ErrorData(BaseModel):
    """``{"errMsg": <string>}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error_msg: str = Field(alias="errMsg")


# ------------------------------------------------------------------
# Messages
# ------------------------------------------------------------------


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=_new_id, alias="@id")
    type: str = Field(alias="@type")

    def to_message(self) -> dict[str, Any]:
        """Return the JSON-ready wire representation."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class DIDDocRequest(_Message):
    """Asks the service for a fresh peer DID document."""

    type: str = Field(default=DIDDOC_REQ, alias="@type")


class DIDDocResponse(_Message):
    """Carries the service's new DID document."""

    type: str = Field(default=DIDDOC_RESP, alias="@type")
    data: DIDDocData


class ConnRequest(_Message):
    """Asks the service to connect to and route for the enclosed DID document."""

    type: str = Field(default=REGISTER_ROUTE_REQ, alias="@type")
    data: DIDDocData | None = None


class ConnResponse(_Message):
    """Acknowledges a completed route registration."""

    type: str = Field(default=REGISTER_ROUTE_RESP, alias="@type")


class ErrorResponse(_Message):
    """Reports a failed request; ``type`` is the paired response type."""

    data: ErrorData


__all__ = [
    "ConnRequest",
    "ConnResponse",
    "DIDCommMessage",
    "DIDDocData",
    "DIDDocRequest",
    "DIDDocResponse",
    "ErrorData",
    "ErrorResponse",
]
