"""Tests for blinded_routing.bootstrap — logging setup and service wiring."""
from __future__ import annotations

import base64
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.logging import RichHandler

from blinded_routing.bootstrap import (
    build_routing_service,
    configure_logging,
    create_transient_provider,
)
from blinded_routing.config import RoutingSettings
from blinded_routing.did import ServiceEndpoint, VDRRegistry
from blinded_routing.messaging import (
    DIDDOC_REQ,
    REGISTER_ROUTE_REQ,
    TXN_STORE_NAME,
    DIDCommMessage,
    InMemoryMessenger,
    MessageRegistrar,
)
from blinded_routing.storage import MemoryStorageProvider, SQLiteStorageProvider


@pytest.fixture()
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_installs_rich_handler(self, restore_root_logger: None) -> None:
        configure_logging("debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in root.handlers)


# ---------------------------------------------------------------------------
# create_transient_provider
# ---------------------------------------------------------------------------


class TestCreateTransientProvider:
    def test_memory(self) -> None:
        settings = RoutingSettings(transient_store="memory")
        assert isinstance(create_transient_provider(settings), MemoryStorageProvider)

    def test_sqlite(self, tmp_path: Path) -> None:
        settings = RoutingSettings(
            transient_store="sqlite", transient_store_path=tmp_path / "t.db"
        )
        provider = create_transient_provider(settings)
        try:
            assert isinstance(provider, SQLiteStorageProvider)
            assert (tmp_path / "t.db").exists()
        finally:
            provider.close()


# ---------------------------------------------------------------------------
# build_routing_service
# ---------------------------------------------------------------------------


class TestBuildRoutingService:
    def test_full_handshake_with_defaults(self) -> None:
        settings = RoutingSettings(service_endpoint="https://router.example.com/didcomm")
        messenger = InMemoryMessenger()
        registrar = MessageRegistrar()
        service = build_routing_service(settings, messenger=messenger, registrar=registrar)
        try:
            registrar.route(DIDCommMessage.new(DIDDOC_REQ, msg_id="r1"))
            _, reply = messenger.wait_for(1)[0]
            assert "errMsg" not in reply["data"]

            client = VDRRegistry().create(
                "peer", services=[ServiceEndpoint(endpoint="https://client.example.com")]
            )
            registrar.route(
                DIDCommMessage.new(
                    REGISTER_ROUTE_REQ,
                    msg_id="c1",
                    parent_thread_id="r1",
                    data={"did_doc": base64.b64encode(client.to_json_bytes()).decode("ascii")},
                )
            )
            _, reply = messenger.wait_for(2)[1]
            assert "data" not in reply
        finally:
            service.close()
            service.join(2.0)

    def test_uses_given_transient_store(self) -> None:
        provider = MemoryStorageProvider()
        service = build_routing_service(
            RoutingSettings(), messenger=InMemoryMessenger(), transient_store=provider
        )
        try:
            service.handle(DIDCommMessage.new(DIDDOC_REQ, msg_id="r1"))
            assert provider.open_store(TXN_STORE_NAME).get("r1").startswith(b"did:peer:")
        finally:
            service.close()
            service.join(2.0)

    def test_custom_store_name(self) -> None:
        provider = MemoryStorageProvider()
        service = build_routing_service(
            RoutingSettings(txn_store_name="other_txn"),
            messenger=InMemoryMessenger(),
            transient_store=provider,
        )
        try:
            assert provider.open_store("other_txn") is not None
        finally:
            service.close()
            service.join(2.0)
