"""In-memory transient storage.

Suitable for a single process: state disappears on restart, which matches
the lifetime expected of handshake transactions.
"""
from __future__ import annotations

import threading

from blinded_routing.storage.base import (
    KeyNotFoundError,
    StorageProvider,
    Store,
    StoreAlreadyExistsError,
    StoreNotFoundError,
)


class MemoryStore(Store):
    """Dictionary-backed store guarded by a lock."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def get(self, key: str) -> bytes:
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class MemoryStorageProvider(StorageProvider):
    """Keeps every store in process memory."""

    def __init__(self) -> None:
        self._stores: dict[str, MemoryStore] = {}
        self._lock = threading.Lock()

    def create_store(self, name: str) -> None:
        with self._lock:
            if name in self._stores:
                raise StoreAlreadyExistsError(name)
            self._stores[name] = MemoryStore(name)

    def open_store(self, name: str) -> MemoryStore:
        with self._lock:
            try:
                return self._stores[name]
            except KeyError:
                raise StoreNotFoundError(name) from None

    def close(self) -> None:
        with self._lock:
            self._stores.clear()


__all__ = ["MemoryStorageProvider", "MemoryStore"]
