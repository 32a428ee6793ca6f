"""VDRRegistry — dispatches DID creation to method providers.

The registry owns one provider per DID method and keeps every document it
created so that local DIDs can be resolved later. All public methods are
thread-safe via a single :class:`threading.Lock`.

Example
-------
::

    registry = VDRRegistry()
    doc = registry.create("peer", services=[ServiceEndpoint("https://a.example")])
    same = registry.parse_document(doc.to_json_bytes())
    assert same.id == doc.id
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol

from blinded_routing.did.document import DIDDocument, DIDDocumentError, ServiceEndpoint
from blinded_routing.did.peer import PeerDIDProvider

logger = logging.getLogger(__name__)


class DIDMethodProvider(Protocol):
    """Anything able to mint a new DID document for one method."""

    method: str

    def create(self, services: Sequence[ServiceEndpoint] = ()) -> DIDDocument: ...


class VDRError(Exception):
    """Base exception for VDRRegistry errors."""


class UnsupportedMethodError(VDRError):
    """Raised when no provider is registered for a DID method."""

    def __init__(self, method: str) -> None:
        super().__init__(f"DID method {method!r} is not supported by this registry.")


class DIDNotFoundError(VDRError):
    """Raised when a DID is not known to the registry."""

    def __init__(self, did: str) -> None:
        super().__init__(f"DID {did!r} is not registered in this registry.")


class VDRRegistry:
    """Create, parse and resolve DID documents.

    Parameters
    ----------
    providers:
        Method providers to register. Defaults to a single
        :class:`PeerDIDProvider`.
    """

    def __init__(self, providers: Sequence[DIDMethodProvider] | None = None) -> None:
        self._providers: dict[str, DIDMethodProvider] = {}
        self._documents: dict[str, DIDDocument] = {}
        self._lock = threading.Lock()
        for provider in providers if providers is not None else [PeerDIDProvider()]:
            self.register_provider(provider)

    def register_provider(self, provider: DIDMethodProvider) -> None:
        """Register (or replace) the provider for ``provider.method``."""
        with self._lock:
            self._providers[provider.method] = provider
        logger.debug("Registered DID method provider: %s", provider.method)

    def supported_methods(self) -> list[str]:
        with self._lock:
            return sorted(self._providers)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(
        self, method: str, services: Sequence[ServiceEndpoint] = ()
    ) -> DIDDocument:
        """Create a new DID document with the provider for *method*.

        Raises
        ------
        UnsupportedMethodError
            If no provider handles *method*.
        """
        with self._lock:
            provider = self._providers.get(method)
        if provider is None:
            raise UnsupportedMethodError(method)

        document = provider.create(services)
        with self._lock:
            self._documents[document.id] = document
        logger.info("Created DID %s", document.id)
        return document

    # ------------------------------------------------------------------
    # Parsing and resolution
    # ------------------------------------------------------------------

    @staticmethod
    def parse_document(raw: bytes | str) -> DIDDocument:
        """Parse wire bytes into a validated :class:`DIDDocument`.

        Raises
        ------
        DIDDocumentError
            If the bytes do not hold a structurally valid document.
        """
        return DIDDocument.from_json(raw)

    def resolve(self, did: str) -> DIDDocument:
        """Return a document previously created by this registry.

        Raises
        ------
        DIDNotFoundError
            If *did* was not created here.
        """
        with self._lock:
            document = self._documents.get(did)
        if document is None:
            raise DIDNotFoundError(did)
        return document

    def created_dids(self) -> list[str]:
        with self._lock:
            return sorted(self._documents)


__all__ = [
    "DIDDocumentError",
    "DIDMethodProvider",
    "DIDNotFoundError",
    "UnsupportedMethodError",
    "VDRError",
    "VDRRegistry",
]
