"""Process wiring — builds a RoutingService from settings.

Example
-------
::

    from blinded_routing.bootstrap import build_routing_service
    from blinded_routing.messaging import InMemoryMessenger

    service = build_routing_service(messenger=InMemoryMessenger())
"""
from __future__ import annotations

import logging

from rich.logging import RichHandler

from blinded_routing.config import RoutingSettings
from blinded_routing.connections import (
    DIDExchangeClient,
    InMemoryDIDExchange,
    InMemoryMediator,
    MediatorClient,
)
from blinded_routing.did import VDRRegistry
from blinded_routing.messaging import MessageRegistrar, Messenger, RoutingService
from blinded_routing.storage import (
    MemoryStorageProvider,
    SQLiteStorageProvider,
    StorageProvider,
)


def configure_logging(level: str = "INFO") -> None:
    """Route log records through rich, at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def create_transient_provider(settings: RoutingSettings) -> StorageProvider:
    """Return the transient store backend selected by *settings*."""
    if settings.transient_store == "sqlite":
        return SQLiteStorageProvider(settings.transient_store_path)
    return MemoryStorageProvider()


def build_routing_service(
    settings: RoutingSettings | None = None,
    *,
    messenger: Messenger,
    registrar: MessageRegistrar | None = None,
    vdr: VDRRegistry | None = None,
    didexchange: DIDExchangeClient | None = None,
    mediator: MediatorClient | None = None,
    transient_store: StorageProvider | None = None,
) -> RoutingService:
    """Assemble a running :class:`RoutingService`.

    Collaborators that are not passed in default to the in-memory
    implementations; the in-memory mediator only accepts connections known
    to the in-memory DID exchange.
    """
    settings = settings or RoutingSettings()
    if didexchange is None:
        didexchange = InMemoryDIDExchange()
    if mediator is None:
        if isinstance(didexchange, InMemoryDIDExchange):
            mediator = InMemoryMediator(connection_exists=didexchange.has_connection)
        else:
            mediator = InMemoryMediator()

    return RoutingService(
        vdr=vdr or VDRRegistry(),
        didexchange=didexchange,
        mediator=mediator,
        messenger=messenger,
        transient_store=transient_store or create_transient_provider(settings),
        service_endpoint=settings.service_endpoint,
        registrar=registrar,
        txn_store_name=settings.txn_store_name,
        replay_policy=settings.replay_policy,
        inbox_size=settings.inbox_size,
        logger=logging.getLogger("blinded_routing.msgsvc"),
    )


__all__ = ["build_routing_service", "configure_logging", "create_transient_provider"]
