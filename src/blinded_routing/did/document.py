"""DIDDocument — W3C DID Core document model exchanged during the handshake.

Any DID method is accepted on parse; documents created locally use the
``peer`` method (see :mod:`blinded_routing.did.peer`).

DID syntax
----------
::

    did:<method>:<method-specific-id>

Specification reference
-----------------------
https://www.w3.org/TR/did-core/#data-model
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

DID_CONTEXT: str = "https://www.w3.org/ns/did/v1"

_DID_PATTERN = re.compile(
    r"^did:(?P<method>[a-z0-9]+):(?P<specific_id>[A-Za-z0-9._:%\-]+)$"
)


class DIDDocumentError(ValueError):
    """Raised when a DID or DID document is structurally invalid."""


def parse_did(did: str) -> tuple[str, str]:
    """Split a DID into ``(method, method_specific_id)``.

    Raises
    ------
    DIDDocumentError
        If *did* does not follow the ``did:<method>:<id>`` syntax.
    """
    match = _DID_PATTERN.match(did)
    if not match:
        raise DIDDocumentError(
            f"Malformed DID {did!r}. Expected format: did:<method>:<method-specific-id>"
        )
    return match.group("method"), match.group("specific_id")


# ------------------------------------------------------------------
# Verification method
# ------------------------------------------------------------------

_ALLOWED_VERIFICATION_TYPES = frozenset(
    {"Ed25519VerificationKey2018", "Ed25519VerificationKey2020", "JsonWebKey2020"}
)


@dataclass(frozen=True)
class VerificationMethod:
    """A public key attached to a DID document.

    Parameters
    ----------
    id:
        The verification method identifier (e.g. ``did:peer:0z6Mk...#key-1``).
    type:
        One of the supported key types.
    controller:
        The DID that controls this key.
    public_key_multibase:
        The public key in multibase form.
    """

    id: str
    type: str
    controller: str
    public_key_multibase: str

    def __post_init__(self) -> None:
        if self.type not in _ALLOWED_VERIFICATION_TYPES:
            raise DIDDocumentError(
                f"Unsupported verification method type {self.type!r}. "
                f"Allowed: {sorted(_ALLOWED_VERIFICATION_TYPES)}"
            )
        if not self.id:
            raise DIDDocumentError("VerificationMethod.id must not be empty.")
        if not self.controller:
            raise DIDDocumentError("VerificationMethod.controller must not be empty.")
        if not self.public_key_multibase:
            raise DIDDocumentError(
                "VerificationMethod.public_key_multibase must not be empty."
            )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "controller": self.controller,
            "publicKeyMultibase": self.public_key_multibase,
        }


# ------------------------------------------------------------------
# Service endpoint
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceEndpoint:
    """A service endpoint advertised in a DID document.

    ``id`` and ``type`` may be left empty when requesting a new document;
    the creating method fills them in.
    """

    endpoint: str
    id: str = ""
    type: str = ""

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise DIDDocumentError("ServiceEndpoint.endpoint must not be empty.")

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "type": self.type,
            "serviceEndpoint": self.endpoint,
        }


# ------------------------------------------------------------------
# DID Document (Pydantic v2)
# ------------------------------------------------------------------


class DIDDocument(BaseModel):
    """A W3C DID Core document.

    Parameters
    ----------
    context:
        JSON-LD context URIs. Defaults to the W3C DID v1 context.
    id:
        The DID subject.
    verification_method:
        Public keys associated with this DID.
    authentication:
        Verification method ids authorized for authentication.
    service:
        Service endpoints associated with this DID subject.
    created:
        UTC datetime when this document was first created.
    updated:
        UTC datetime of the most recent update.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    context: list[str] = Field(default_factory=lambda: [DID_CONTEXT])
    id: str
    verification_method: list[VerificationMethod] = Field(default_factory=list)
    authentication: list[str] = Field(default_factory=list)
    service: list[ServiceEndpoint] = Field(default_factory=list)
    created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("id")
    @classmethod
    def validate_did_format(cls, value: str) -> str:
        parse_did(value)
        return value

    @field_validator("context")
    @classmethod
    def validate_context_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("context must contain at least one URI.")
        return value

    @model_validator(mode="after")
    def validate_authentication_references(self) -> "DIDDocument":
        """Authentication references must point to declared methods."""
        method_ids = {vm.id for vm in self.verification_method}
        for auth_ref in self.authentication:
            if auth_ref not in method_ids:
                raise ValueError(
                    f"authentication reference {auth_ref!r} does not match "
                    "any declared verification_method id."
                )
        return self

    @property
    def method(self) -> str:
        """The DID method name, e.g. ``"peer"``."""
        method, _ = parse_did(self.id)
        return method

    def service_endpoints(self) -> list[str]:
        """Return the endpoint URIs of all declared services."""
        return [svc.endpoint for svc in self.service]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the W3C JSON representation as a plain dictionary."""
        return {
            "@context": list(self.context),
            "id": self.id,
            "verificationMethod": [vm.to_dict() for vm in self.verification_method],
            "authentication": list(self.authentication),
            "service": [svc.to_dict() for svc in self.service],
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
        }

    def to_json_bytes(self) -> bytes:
        """Serialize to the canonical UTF-8 JSON bytes sent on the wire."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_json(cls, raw: bytes | str) -> "DIDDocument":
        """Parse and validate a document produced by :meth:`to_json_bytes`.

        Raises
        ------
        DIDDocumentError
            If the input is not JSON, misses required members, or fails
            structural validation.
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DIDDocumentError(f"Invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise DIDDocumentError(
                f"DID document must be a JSON object, got {type(data).__name__}"
            )
        if "id" not in data:
            raise DIDDocumentError("DID document is missing the 'id' member.")

        try:
            verification_methods = [
                VerificationMethod(
                    id=vm["id"],
                    type=vm["type"],
                    controller=vm["controller"],
                    public_key_multibase=vm["publicKeyMultibase"],
                )
                for vm in data.get("verificationMethod", [])
            ]
            services = [
                ServiceEndpoint(
                    id=svc.get("id", ""),
                    type=svc.get("type", ""),
                    endpoint=svc["serviceEndpoint"],
                )
                for svc in data.get("service", [])
            ]
            fields: dict[str, Any] = {
                "id": data["id"],
                "verification_method": verification_methods,
                "authentication": data.get("authentication", []),
                "service": services,
            }
            if "@context" in data:
                context = data["@context"]
                fields["context"] = [context] if isinstance(context, str) else context
            # RFC 3339 timestamps (including a trailing "Z") are parsed by pydantic
            for stamp in ("created", "updated"):
                if data.get(stamp):
                    fields[stamp] = data[stamp]
            return cls(**fields)
        except DIDDocumentError:
            raise
        except (AttributeError, KeyError, TypeError) as exc:
            raise DIDDocumentError(f"Malformed DID document member: {exc}") from exc
        except (ValidationError, ValueError) as exc:
            raise DIDDocumentError(f"Invalid DID document: {exc}") from exc


__all__ = [
    "DID_CONTEXT",
    "DIDDocument",
    "DIDDocumentError",
    "ServiceEndpoint",
    "VerificationMethod",
    "parse_did",
]
