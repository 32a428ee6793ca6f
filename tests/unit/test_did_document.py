"""Tests for blinded_routing.did.document — DID syntax and DIDDocument model."""
from __future__ import annotations

import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from blinded_routing.did.document import (
    DID_CONTEXT,
    DIDDocument,
    DIDDocumentError,
    ServiceEndpoint,
    VerificationMethod,
    parse_did,
)

DID = "did:peer:0z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"
KEY_ID = f"{DID}#key-1"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def verification_method() -> VerificationMethod:
    return VerificationMethod(
        id=KEY_ID,
        type="Ed25519VerificationKey2020",
        controller=DID,
        public_key_multibase="z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK",
    )


@pytest.fixture()
def document(verification_method: VerificationMethod) -> DIDDocument:
    return DIDDocument(
        id=DID,
        verification_method=[verification_method],
        authentication=[KEY_ID],
        service=[
            ServiceEndpoint(
                endpoint="https://router.example.com/didcomm",
                id=f"{DID}#didcomm-0",
                type="did-communication",
            )
        ],
    )


# ---------------------------------------------------------------------------
# parse_did
# ---------------------------------------------------------------------------


class TestParseDID:
    def test_splits_method_and_id(self) -> None:
        assert parse_did("did:example:123456") == ("example", "123456")

    def test_specific_id_may_contain_colons(self) -> None:
        assert parse_did("did:web:example.com:users:alice") == (
            "web",
            "example.com:users:alice",
        )

    @pytest.mark.parametrize(
        "value",
        ["", "did:", "did:peer", "did:peer:", "DID:peer:abc", "did:Peer:abc", "urn:peer:abc"],
    )
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(DIDDocumentError, match="Malformed DID"):
            parse_did(value)


# ---------------------------------------------------------------------------
# VerificationMethod and ServiceEndpoint
# ---------------------------------------------------------------------------


class TestVerificationMethod:
    def test_to_dict_uses_camel_case(self, verification_method: VerificationMethod) -> None:
        data = verification_method.to_dict()
        assert data["publicKeyMultibase"] == verification_method.public_key_multibase
        assert data["controller"] == DID

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(DIDDocumentError, match="Unsupported verification method type"):
            VerificationMethod(id=KEY_ID, type="RsaKey", controller=DID, public_key_multibase="z1")

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(DIDDocumentError):
            VerificationMethod(
                id=KEY_ID, type="JsonWebKey2020", controller=DID, public_key_multibase=""
            )


class TestServiceEndpoint:
    def test_empty_endpoint_rejected(self) -> None:
        with pytest.raises(DIDDocumentError):
            ServiceEndpoint(endpoint="")

    def test_to_dict(self) -> None:
        svc = ServiceEndpoint(endpoint="https://a.example", id="s1", type="did-communication")
        assert svc.to_dict() == {
            "id": "s1",
            "type": "did-communication",
            "serviceEndpoint": "https://a.example",
        }


# ---------------------------------------------------------------------------
# DIDDocument
# ---------------------------------------------------------------------------


class TestDIDDocument:
    def test_default_context(self) -> None:
        assert DIDDocument(id=DID).context == [DID_CONTEXT]

    def test_method_property(self, document: DIDDocument) -> None:
        assert document.method == "peer"

    def test_service_endpoints(self, document: DIDDocument) -> None:
        assert document.service_endpoints() == ["https://router.example.com/didcomm"]

    def test_invalid_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DIDDocument(id="not-a-did")

    def test_empty_context_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DIDDocument(id=DID, context=[])

    def test_dangling_authentication_rejected(self) -> None:
        with pytest.raises(ValidationError, match="authentication reference"):
            DIDDocument(id=DID, authentication=[f"{DID}#missing"])

    def test_frozen(self, document: DIDDocument) -> None:
        with pytest.raises(ValidationError):
            document.id = "did:peer:other"  # type: ignore[misc]


class TestDIDDocumentSerialization:
    def test_to_dict_members(self, document: DIDDocument) -> None:
        data = document.to_dict()
        assert data["@context"] == [DID_CONTEXT]
        assert data["id"] == DID
        assert data["verificationMethod"][0]["id"] == KEY_ID
        assert data["service"][0]["serviceEndpoint"] == "https://router.example.com/didcomm"

    def test_json_bytes_are_compact(self, document: DIDDocument) -> None:
        raw = document.to_json_bytes()
        assert b", " not in raw
        assert json.loads(raw)["id"] == DID

    def test_round_trip(self, document: DIDDocument) -> None:
        parsed = DIDDocument.from_json(document.to_json_bytes())
        assert parsed == document

    def test_from_json_accepts_str(self, document: DIDDocument) -> None:
        parsed = DIDDocument.from_json(document.to_json_bytes().decode("utf-8"))
        assert parsed.id == DID

    def test_minimal_document(self) -> None:
        parsed = DIDDocument.from_json(json.dumps({"id": DID}))
        assert parsed.verification_method == []
        assert parsed.service == []

    def test_string_context_is_wrapped(self) -> None:
        parsed = DIDDocument.from_json(json.dumps({"@context": DID_CONTEXT, "id": DID}))
        assert parsed.context == [DID_CONTEXT]


class TestDIDDocumentParseErrors:
    def test_not_json(self) -> None:
        with pytest.raises(DIDDocumentError, match="Invalid JSON"):
            DIDDocument.from_json(b"{not json")

    def test_not_utf8(self) -> None:
        with pytest.raises(DIDDocumentError):
            DIDDocument.from_json(b"\xff\xfe\x00")

    def test_not_an_object(self) -> None:
        with pytest.raises(DIDDocumentError, match="JSON object"):
            DIDDocument.from_json(b"[1, 2]")

    def test_missing_id(self) -> None:
        with pytest.raises(DIDDocumentError, match="missing the 'id'"):
            DIDDocument.from_json(b'{"service": []}')

    def test_malformed_did(self) -> None:
        with pytest.raises(DIDDocumentError, match="Invalid DID document"):
            DIDDocument.from_json(b'{"id": "peer:abc"}')

    def test_verification_method_missing_key(self) -> None:
        raw = json.dumps({"id": DID, "verificationMethod": [{"id": KEY_ID}]})
        with pytest.raises(DIDDocumentError, match="Malformed DID document member"):
            DIDDocument.from_json(raw)

    def test_service_entry_not_an_object(self) -> None:
        raw = json.dumps({"id": DID, "service": ["https://a.example"]})
        with pytest.raises(DIDDocumentError):
            DIDDocument.from_json(raw)

    def test_unsupported_key_type(self) -> None:
        raw = json.dumps(
            {
                "id": DID,
                "verificationMethod": [
                    {
                        "id": KEY_ID,
                        "type": "RsaVerificationKey2018",
                        "controller": DID,
                        "publicKeyMultibase": "z1",
                    }
                ],
            }
        )
        with pytest.raises(DIDDocumentError, match="Unsupported verification method type"):
            DIDDocument.from_json(raw)

    def test_bad_timestamp(self) -> None:
        with pytest.raises(DIDDocumentError):
            DIDDocument.from_json(json.dumps({"id": DID, "created": "yesterday"}))

    def test_zulu_timestamps_accepted(self) -> None:
        raw = json.dumps(
            {
                "id": DID,
                "created": "2021-03-04T05:06:07Z",
                "updated": "2021-03-04T05:06:07.123Z",
            }
        )
        parsed = DIDDocument.from_json(raw)
        assert parsed.created.year == 2021
        assert parsed.created.utcoffset() == timedelta(0)
        assert parsed.updated.microsecond == 123000
