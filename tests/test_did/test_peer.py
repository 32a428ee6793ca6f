"""Tests for peer DID creation and the multibase key helpers."""
from __future__ import annotations

import pytest

from blinded_routing.did.document import ServiceEndpoint
from blinded_routing.did.keys import (
    ED25519_MULTICODEC_PREFIX,
    Ed25519KeyManager,
    base58btc_decode,
    base58btc_encode,
    decode_multibase_ed25519,
    multibase_ed25519,
)
from blinded_routing.did.peer import DIDCOMM_SERVICE_TYPE, PeerDIDProvider


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def provider() -> PeerDIDProvider:
    return PeerDIDProvider()


class FixedKeyManager(Ed25519KeyManager):
    def generate_keypair(self) -> tuple[bytes, bytes]:
        return b"\x01" * 32, b"\x02" * 32


# ---------------------------------------------------------------------------
# base58btc
# ---------------------------------------------------------------------------


class TestBase58:
    def test_known_vector(self) -> None:
        assert base58btc_encode(b"hello world") == "StV1DL6CwTryKyV"

    def test_leading_zero_bytes(self) -> None:
        encoded = base58btc_encode(b"\x00\x00\x01")
        assert encoded.startswith("11")
        assert base58btc_decode(encoded) == b"\x00\x00\x01"

    def test_empty(self) -> None:
        assert base58btc_encode(b"") == ""
        assert base58btc_decode("") == b""

    def test_invalid_character(self) -> None:
        with pytest.raises(ValueError, match="Invalid base58btc character"):
            base58btc_decode("0OIl")


class TestMultibase:
    def test_ed25519_keys_start_with_z6mk(self) -> None:
        _, public = Ed25519KeyManager().generate_keypair()
        assert multibase_ed25519(public).startswith("z6Mk")

    def test_decode_recovers_public_key(self) -> None:
        _, public = Ed25519KeyManager().generate_keypair()
        assert decode_multibase_ed25519(multibase_ed25519(public)) == public

    def test_decode_requires_z_prefix(self) -> None:
        with pytest.raises(ValueError, match="base58btc multibase"):
            decode_multibase_ed25519("m6MkabC")

    def test_decode_rejects_other_codec(self) -> None:
        value = "z" + base58btc_encode(b"\x12\x00" + b"\x02" * 32)
        with pytest.raises(ValueError, match="Unsupported multicodec prefix"):
            decode_multibase_ed25519(value)

    def test_decode_rejects_short_key(self) -> None:
        value = "z" + base58btc_encode(ED25519_MULTICODEC_PREFIX + b"\x02" * 8)
        with pytest.raises(ValueError, match="32 bytes"):
            decode_multibase_ed25519(value)


class TestEd25519KeyManager:
    def test_keypair_sizes(self) -> None:
        private, public = Ed25519KeyManager().generate_keypair()
        assert len(private) == 32
        assert len(public) == 32

    def test_keypairs_are_random(self) -> None:
        manager = Ed25519KeyManager()
        assert manager.generate_keypair() != manager.generate_keypair()


# ---------------------------------------------------------------------------
# PeerDIDProvider
# ---------------------------------------------------------------------------


class TestPeerDIDProvider:
    def test_did_is_numalgo_zero(self, provider: PeerDIDProvider) -> None:
        doc = provider.create()
        assert doc.id.startswith("did:peer:0z6Mk")
        assert doc.method == "peer"

    def test_did_derived_from_key(self) -> None:
        doc = PeerDIDProvider(FixedKeyManager()).create()
        multibase = multibase_ed25519(b"\x02" * 32)
        assert doc.id == f"did:peer:0{multibase}"
        assert doc.verification_method[0].public_key_multibase == multibase

    def test_single_authentication_key(self, provider: PeerDIDProvider) -> None:
        doc = provider.create()
        assert len(doc.verification_method) == 1
        key = doc.verification_method[0]
        assert key.type == "Ed25519VerificationKey2020"
        assert key.controller == doc.id
        assert doc.authentication == [key.id]

    def test_services_completed(self, provider: PeerDIDProvider) -> None:
        doc = provider.create(
            services=[
                ServiceEndpoint(endpoint="https://a.example"),
                ServiceEndpoint(endpoint="https://b.example", id="custom", type="custom-type"),
            ]
        )
        first, second = doc.service
        assert first.id == f"{doc.id}#didcomm-0"
        assert first.type == DIDCOMM_SERVICE_TYPE
        assert (second.id, second.type) == ("custom", "custom-type")
        assert doc.service_endpoints() == ["https://a.example", "https://b.example"]

    def test_no_services(self, provider: PeerDIDProvider) -> None:
        assert provider.create().service == []

    def test_each_call_creates_new_did(self, provider: PeerDIDProvider) -> None:
        assert provider.create().id != provider.create().id

    def test_private_key_kept(self, provider: PeerDIDProvider) -> None:
        doc = provider.create()
        assert len(provider.private_key(doc.id)) == 32
        assert provider.created_dids() == [doc.id]

    def test_private_key_unknown_did(self, provider: PeerDIDProvider) -> None:
        with pytest.raises(KeyError, match="No private key"):
            provider.private_key("did:peer:0zUnknown")

    def test_private_key_not_serialized(self) -> None:
        doc = PeerDIDProvider(FixedKeyManager()).create()
        assert (b"\x01" * 32).hex() not in doc.to_json_bytes().decode("utf-8")
