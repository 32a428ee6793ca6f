"""blinded_routing.storage — transient key/value stores for handshake state.

Backends
--------
memory
    MemoryStorageProvider, process-local.
sqlite
    SQLiteStorageProvider, one database file shared by all stores.
"""
from __future__ import annotations

from blinded_routing.storage.base import (
    KeyNotFoundError,
    StorageError,
    StorageProvider,
    Store,
    StoreAlreadyExistsError,
    StoreNotFoundError,
    ensure_store,
)
from blinded_routing.storage.memory import MemoryStorageProvider, MemoryStore
from blinded_routing.storage.sqlite import SQLiteStorageProvider, SQLiteStore

__all__ = [
    "KeyNotFoundError",
    "MemoryStorageProvider",
    "MemoryStore",
    "SQLiteStorageProvider",
    "SQLiteStore",
    "StorageError",
    "StorageProvider",
    "Store",
    "StoreAlreadyExistsError",
    "StoreNotFoundError",
    "ensure_store",
]
