"""RelyingParties — DAO for registered relying-party clients.

Each relying party is an OIDC client id bound to the DID it uses during the
handshake. Rows live in the ``relying_party`` table::

    relying_party(id INTEGER PRIMARY KEY AUTOINCREMENT, client_id TEXT, did TEXT)

The DAO works on any DB-API connection using ``?`` placeholders (sqlite3 in
this package).
"""
from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from blinded_routing.did.document import DIDDocumentError, parse_did

_CREATE_RELYING_PARTY = """
CREATE TABLE IF NOT EXISTS relying_party (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    client_id TEXT NOT NULL UNIQUE,
    did       TEXT NOT NULL
);
"""

_SQL_INSERT_RELYING_PARTY = "insert into relying_party (client_id, did) values (?, ?)"
_SQL_RELYING_PARTY_FIND_BY_CLIENT_ID = (
    "select id, client_id, did from relying_party where client_id = ?"
)


class RelyingPartyError(Exception):
    """Raised when a relying party cannot be stored or read."""


class RelyingPartyNotFoundError(RelyingPartyError):
    """Raised when no relying party is registered for a client id."""

    def __init__(self, client_id: str) -> None:
        super().__init__(f"no relying party registered for client_id {client_id!r}")
        self.client_id = client_id


@dataclass
class RelyingParty:
    """A registered relying party.

    ``id`` is assigned by the database on :meth:`RelyingParties.insert`.
    """

    client_id: str
    did: str
    id: int | None = None


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the ``relying_party`` table if it does not exist."""
    with conn:
        conn.execute(_CREATE_RELYING_PARTY)


class RelyingParties:
    """Insert and look up :class:`RelyingParty` rows."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert(self, rp: RelyingParty) -> RelyingParty:
        """Insert *rp* and set its auto-generated ``id``.

        Raises
        ------
        RelyingPartyError
            If the DID is malformed or the insert fails.
        """
        try:
            parse_did(rp.did)
        except DIDDocumentError as exc:
            raise RelyingPartyError(f"failed to insert relying party : {exc}") from exc

        try:
            with self._conn:
                cursor = self._conn.execute(_SQL_INSERT_RELYING_PARTY, (rp.client_id, rp.did))
        except sqlite3.Error as exc:
            raise RelyingPartyError(f"failed to insert relying party : {exc}") from exc

        if cursor.lastrowid is None:
            raise RelyingPartyError("failed to retrieve auto generated id")
        rp.id = cursor.lastrowid
        return rp

    def find_by_client_id(self, client_id: str) -> RelyingParty:
        """Return the relying party registered under *client_id*.

        Raises
        ------
        RelyingPartyNotFoundError
            If no row matches.
        RelyingPartyError
            If the query fails or the stored DID cannot be parsed.
        """
        try:
            row = self._conn.execute(
                _SQL_RELYING_PARTY_FIND_BY_CLIENT_ID, (client_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise RelyingPartyError(
                f"failed to query relying_party by client_id : {exc}"
            ) from exc

        if row is None:
            raise RelyingPartyNotFoundError(client_id)

        row_id, row_client_id, row_did = row
        try:
            parse_did(row_did)
        except DIDDocumentError as exc:
            raise RelyingPartyError(f"failed to parse rpDID {row_did} : {exc}") from exc

        return RelyingParty(id=row_id, client_id=row_client_id, did=row_did)


__all__ = [
    "RelyingParties",
    "RelyingParty",
    "RelyingPartyError",
    "RelyingPartyNotFoundError",
    "create_schema",
]
