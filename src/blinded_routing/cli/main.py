"""CLI entry point for blinded-routing.

Invoked as::

    blinded-routing [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m blinded_routing.cli.main

Commands
--------
version         Show version information
config          Show the effective settings
did create      Create a peer DID document
did parse       Parse and validate a DID document file
handshake       Run a full in-process blinded-routing handshake
rp register     Register a relying party
rp find         Look up a relying party by client id
"""
from __future__ import annotations

import sqlite3
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from blinded_routing.config import RoutingSettings

console = Console()


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="blinded-routing")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Enable logging at this level.",
)
def cli(log_level: str | None) -> None:
    """Blinded-routing DID exchange and mediator registration service"""
    if log_level:
        from blinded_routing.bootstrap import configure_logging

        configure_logging(log_level)


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from blinded_routing import __version__
    from blinded_routing.messaging.types import MSG_TYPE_BASE_URI

    console.print(f"[bold]blinded-routing[/bold] v{__version__}")
    console.print(f"  Protocol: {MSG_TYPE_BASE_URI}")


@cli.command(name="config")
def config_command() -> None:
    """Show the settings resolved from the environment and .env file."""
    settings = _load_settings()

    table = Table(title="blinded-routing settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump(mode="json").items():
        table.add_row(name, str(value))
    console.print(table)


# ------------------------------------------------------------------
# did command group
# ------------------------------------------------------------------


@cli.group(name="did")
def did_group() -> None:
    """Create and inspect DID documents."""


@did_group.command(name="create")
@click.option("--endpoint", "-e", default=None, help="Service endpoint to advertise.")
def did_create_command(endpoint: str | None) -> None:
    """Create a new did:peer document and print it as JSON."""
    from blinded_routing.did import ServiceEndpoint, VDRRegistry

    endpoint = endpoint or _load_settings().service_endpoint
    doc = VDRRegistry().create("peer", services=[ServiceEndpoint(endpoint=endpoint)])
    console.print_json(doc.to_json_bytes().decode("utf-8"))


@did_group.command(name="parse")
@click.argument("doc_file", type=click.Path(exists=True, dir_okay=False))
def did_parse_command(doc_file: str) -> None:
    """Validate the DID document in DOC_FILE."""
    from blinded_routing.did import DIDDocumentError, VDRRegistry

    try:
        doc = VDRRegistry.parse_document(Path(doc_file).read_bytes())
    except DIDDocumentError as exc:
        console.print(f"[red]Invalid DID document:[/red] {escape(str(exc))}")
        sys.exit(1)

    console.print(f"[green]Valid[/green] DID document [bold]{doc.id}[/bold]")
    console.print(f"  Method:    {doc.method}")
    console.print(f"  Keys:      {len(doc.verification_method)}")
    console.print(f"  Services:  {', '.join(doc.service_endpoints()) or '(none)'}")


# ------------------------------------------------------------------
# handshake
# ------------------------------------------------------------------


@cli.command(name="handshake")
@click.option("--endpoint", "-e", default=None, help="Router service endpoint.")
@click.option(
    "--client-endpoint",
    default="http://localhost:9090/client",
    show_default=True,
    help="Endpoint advertised by the simulated client.",
)
@click.option("--timeout", type=float, default=5.0, show_default=True)
def handshake_command(endpoint: str | None, client_endpoint: str, timeout: float) -> None:
    """Run diddoc-req then register-route-req against an in-process router."""
    from blinded_routing.bootstrap import build_routing_service
    from blinded_routing.connections import InMemoryDIDExchange, InMemoryMediator
    from blinded_routing.did import ServiceEndpoint, VDRRegistry
    from blinded_routing.messaging import (
        REGISTER_ROUTE_REQ,
        ConnRequest,
        DIDCommMessage,
        DIDDocData,
        DIDDocRequest,
        DIDDocResponse,
        InMemoryMessenger,
        MessageRegistrar,
    )

    settings = _load_settings()
    if endpoint:
        settings = settings.model_copy(update={"service_endpoint": endpoint})

    messenger = InMemoryMessenger()
    registrar = MessageRegistrar()
    exchange = InMemoryDIDExchange()
    mediator = InMemoryMediator(connection_exists=exchange.has_connection)
    service = build_routing_service(
        settings,
        messenger=messenger,
        registrar=registrar,
        didexchange=exchange,
        mediator=mediator,
    )

    try:
        doc_req = DIDCommMessage(DIDDocRequest().to_message())
        registrar.route(doc_req)
        _, doc_reply = messenger.wait_for(1, timeout)[0]
        _exit_on_error_reply("diddoc-req", doc_reply)
        router_doc = VDRRegistry.parse_document(
            DIDDocResponse.model_validate(doc_reply).data.did_doc or b""
        )

        client_doc = VDRRegistry().create(
            "peer", services=[ServiceEndpoint(endpoint=client_endpoint)]
        )
        conn_payload = ConnRequest(data=DIDDocData(did_doc=client_doc.to_json_bytes()))
        conn_req = DIDCommMessage.new(
            REGISTER_ROUTE_REQ,
            parent_thread_id=doc_req.id,
            data=conn_payload.to_message()["data"],
        )
        registrar.route(conn_req)
        _, conn_reply = messenger.wait_for(2, timeout)[1]
        _exit_on_error_reply("register-route-req", conn_reply)
    except TimeoutError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    finally:
        service.close()
        service.join(timeout)

    connection = exchange.list_connections()[-1]
    table = Table(title="Blinded-routing handshake")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Router DID", router_doc.id)
    table.add_row("Router endpoint", ", ".join(router_doc.service_endpoints()))
    table.add_row("Client DID", client_doc.id)
    table.add_row("Connection", connection.connection_id)
    table.add_row("Routed connections", str(len(mediator.registrations)))
    console.print(table)
    console.print("[green]Handshake completed.[/green]")


def _exit_on_error_reply(step: str, reply: dict[str, object]) -> None:
    data = reply.get("data")
    if isinstance(data, dict) and "errMsg" in data:
        console.print(f"[red]{step} failed:[/red] {escape(str(data['errMsg']))}")
        sys.exit(1)


# ------------------------------------------------------------------
# rp command group
# ------------------------------------------------------------------


@cli.group(name="rp")
def rp_group() -> None:
    """Manage relying-party registrations."""


_db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="SQLite database file (defaults to the configured relying_party_db_path).",
)


@rp_group.command(name="register")
@click.argument("client_id")
@click.argument("did")
@_db_option
def rp_register_command(client_id: str, did: str, db_path: str | None) -> None:
    """Register CLIENT_ID with its DID."""
    from blinded_routing.db import RelyingParties, RelyingParty, RelyingPartyError

    with _open_rp_db(db_path) as conn:
        try:
            rp = RelyingParties(conn).insert(RelyingParty(client_id=client_id, did=did))
        except RelyingPartyError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(1)

    console.print(f"[green]Registered[/green] relying party [bold]{rp.client_id}[/bold]")
    console.print(f"  ID:   {rp.id}")
    console.print(f"  DID:  {rp.did}")


@rp_group.command(name="find")
@click.argument("client_id")
@_db_option
def rp_find_command(client_id: str, db_path: str | None) -> None:
    """Show the relying party registered under CLIENT_ID."""
    from blinded_routing.db import RelyingParties, RelyingPartyError

    with _open_rp_db(db_path) as conn:
        try:
            rp = RelyingParties(conn).find_by_client_id(client_id)
        except RelyingPartyError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(1)

    table = Table(title=f"Relying party {client_id}")
    table.add_column("ID", justify="right")
    table.add_column("Client ID", style="cyan")
    table.add_column("DID")
    table.add_row(str(rp.id), rp.client_id, rp.did)
    console.print(table)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _load_settings() -> "RoutingSettings":
    from pydantic import ValidationError

    from blinded_routing.config import RoutingSettings

    try:
        return RoutingSettings()
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        sys.exit(1)


@contextmanager
def _open_rp_db(db_path: str | None) -> Iterator[sqlite3.Connection]:
    from blinded_routing.db import create_schema

    path = Path(db_path) if db_path else _load_settings().relying_party_db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        create_schema(conn)
        yield conn
    finally:
        conn.close()


if __name__ == "__main__":
    cli()
