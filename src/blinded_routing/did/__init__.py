"""blinded_routing.did — identity documents exchanged during the handshake.

Submodules
----------
document
    DIDDocument, VerificationMethod, ServiceEndpoint and DID syntax parsing.
keys
    Ed25519 key generation and multibase helpers.
peer
    PeerDIDProvider for ``did:peer:0`` identities.
registry
    VDRRegistry: method dispatch, document parsing and local resolution.
"""
from __future__ import annotations

from blinded_routing.did.document import (
    DIDDocument,
    DIDDocumentError,
    ServiceEndpoint,
    VerificationMethod,
    parse_did,
)
from blinded_routing.did.keys import Ed25519KeyManager
from blinded_routing.did.peer import PEER_METHOD, PeerDIDProvider
from blinded_routing.did.registry import (
    DIDNotFoundError,
    UnsupportedMethodError,
    VDRError,
    VDRRegistry,
)

__all__ = [
    "DIDDocument",
    "DIDDocumentError",
    "DIDNotFoundError",
    "Ed25519KeyManager",
    "PEER_METHOD",
    "PeerDIDProvider",
    "ServiceEndpoint",
    "UnsupportedMethodError",
    "VDRError",
    "VDRRegistry",
    "VerificationMethod",
    "parse_did",
]
