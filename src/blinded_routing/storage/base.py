"""Transient storage — abstract interfaces shared by all backends.

A :class:`StorageProvider` manages named stores; a :class:`Store` is a flat
``str -> bytes`` map. Backends must make ``put`` and ``get`` atomic per key
and must be safe to reuse for the lifetime of the process.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Base exception for storage backends."""


class StoreAlreadyExistsError(StorageError):
    """Raised by :meth:`StorageProvider.create_store` for a known name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"store {name!r} already exists")
        self.name = name


class StoreNotFoundError(StorageError):
    """Raised when opening a store that was never created."""

    def __init__(self, name: str) -> None:
        super().__init__(f"store {name!r} not found")
        self.name = name


class KeyNotFoundError(StorageError):
    """Raised by :meth:`Store.get` when the key is absent."""

    def __init__(self, key: str) -> None:
        super().__init__(f"data not found for key {key!r}")
        self.key = key


class Store(ABC):
    """A named key/value store."""

    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """Associate *value* with *key*, overwriting any previous value."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the value stored under *key*.

        Raises
        ------
        KeyNotFoundError
            If nothing is stored under *key*.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*. Deleting an absent key is not an error."""


class StorageProvider(ABC):
    """Factory and owner of named stores."""

    @abstractmethod
    def create_store(self, name: str) -> None:
        """Create the store *name*.

        Raises
        ------
        StoreAlreadyExistsError
            If the store already exists.
        """

    @abstractmethod
    def open_store(self, name: str) -> Store:
        """Return a handle to an existing store.

        Raises
        ------
        StoreNotFoundError
            If *name* was never created.
        """

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the provider."""


def ensure_store(provider: StorageProvider, name: str) -> Store:
    """Create *name* if it does not exist yet, then open it.

    An already-existing store is not an error; every other failure from the
    provider propagates.
    """
    try:
        provider.create_store(name)
    except StoreAlreadyExistsError:
        pass
    return provider.open_store(name)


__all__ = [
    "KeyNotFoundError",
    "StorageError",
    "StorageProvider",
    "Store",
    "StoreAlreadyExistsError",
    "StoreNotFoundError",
    "ensure_store",
]
