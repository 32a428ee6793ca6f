"""blinded_routing.db — permanent relying-party records."""
from __future__ import annotations

from blinded_routing.db.relying_parties import (
    RelyingParties,
    RelyingParty,
    RelyingPartyError,
    RelyingPartyNotFoundError,
    create_schema,
)

__all__ = [
    "RelyingParties",
    "RelyingParty",
    "RelyingPartyError",
    "RelyingPartyNotFoundError",
    "create_schema",
]
