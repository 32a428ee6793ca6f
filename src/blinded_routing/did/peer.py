"""PeerDIDProvider — creates ``did:peer`` documents (numalgo 0).

A numalgo-0 peer DID is the multibase-encoded inception key::

    did:peer:0z6Mk<base58btc(0xed01 + public key)>

The document carries a single Ed25519 verification method, used for
authentication, and the services requested by the caller. Private keys are
kept in memory by the provider so a later component can sign on behalf of
the DID; they never appear in the serialized document.
"""
from __future__ import annotations

import threading
from collections.abc import Sequence

from blinded_routing.did.document import DIDDocument, ServiceEndpoint, VerificationMethod
from blinded_routing.did.keys import Ed25519KeyManager, multibase_ed25519

PEER_METHOD: str = "peer"
DIDCOMM_SERVICE_TYPE: str = "did-communication"


class PeerDIDProvider:
    """Create ``did:peer:0`` identities.

    Parameters
    ----------
    key_manager:
        Optional key manager; a new :class:`Ed25519KeyManager` is used if
        not provided.

    Example
    -------
    ::

        provider = PeerDIDProvider()
        doc = provider.create(services=[ServiceEndpoint("https://agent.example/msg")])
        assert doc.id.startswith("did:peer:0z")
    """

    method: str = PEER_METHOD

    def __init__(self, key_manager: Ed25519KeyManager | None = None) -> None:
        self._key_manager = key_manager or Ed25519KeyManager()
        self._private_keys: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def create(self, services: Sequence[ServiceEndpoint] = ()) -> DIDDocument:
        """Generate a keypair and build the peer DID document for it.

        Service entries with an empty ``id`` or ``type`` are completed with
        ``<did>#didcomm-<n>`` and ``did-communication``.
        """
        private_bytes, public_bytes = self._key_manager.generate_keypair()
        multibase = multibase_ed25519(public_bytes)
        did = f"did:{PEER_METHOD}:0{multibase}"
        key_id = f"{did}#{multibase}"

        completed = [
            ServiceEndpoint(
                endpoint=svc.endpoint,
                id=svc.id or f"{did}#didcomm-{index}",
                type=svc.type or DIDCOMM_SERVICE_TYPE,
            )
            for index, svc in enumerate(services)
        ]
        document = DIDDocument(
            id=did,
            verification_method=[
                VerificationMethod(
                    id=key_id,
                    type="Ed25519VerificationKey2020",
                    controller=did,
                    public_key_multibase=multibase,
                )
            ],
            authentication=[key_id],
            service=completed,
        )
        with self._lock:
            self._private_keys[did] = private_bytes
        return document

    def private_key(self, did: str) -> bytes:
        """Return the private key held for *did*.

        Raises
        ------
        KeyError
            If *did* was not created by this provider instance.
        """
        with self._lock:
            try:
                return self._private_keys[did]
            except KeyError:
                raise KeyError(
                    f"No private key available for {did!r}. "
                    "The DID must be created with this provider instance."
                ) from None

    def created_dids(self) -> list[str]:
        """Return a sorted list of the DIDs created by this provider."""
        with self._lock:
            return sorted(self._private_keys)


__all__ = ["DIDCOMM_SERVICE_TYPE", "PEER_METHOD", "PeerDIDProvider"]
