"""Transport-facing pieces: reply channel and message-type registration.

The transport itself (HTTP, websockets, ...) is not part of this package.
It hands inbound messages to :meth:`MessageRegistrar.route` and delivers
replies through a :class:`Messenger`.
"""
from __future__ import annotations

import logging
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from blinded_routing.messaging.models import DIDCommMessage

logger = logging.getLogger(__name__)


class Messenger(ABC):
    """Sends replies correlated to an inbound message id."""

    @abstractmethod
    def reply_to(self, message_id: str, payload: dict[str, Any]) -> None:
        """Send *payload* as the reply to *message_id*.

        Implementations raise any exception on delivery failure.
        """


class InMemoryMessenger(Messenger):
    """Collects replies in memory; used by the CLI and in tests."""

    def __init__(self) -> None:
        self._replies: list[tuple[str, dict[str, Any]]] = []
        self._cond = threading.Condition()

    def reply_to(self, message_id: str, payload: dict[str, Any]) -> None:
        with self._cond:
            self._replies.append((message_id, payload))
            self._cond.notify_all()

    @property
    def replies(self) -> list[tuple[str, dict[str, Any]]]:
        with self._cond:
            return list(self._replies)

    def wait_for(self, count: int, timeout: float = 5.0) -> list[tuple[str, dict[str, Any]]]:
        """Block until at least *count* replies were sent.

        Raises
        ------
        TimeoutError
            If fewer than *count* replies arrived within *timeout* seconds.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: len(self._replies) >= count, timeout):
                raise TimeoutError(
                    f"expected {count} replies, got {len(self._replies)} after {timeout}s"
                )
            return list(self._replies)


class RegistrationError(Exception):
    """Raised when a message type is registered twice."""


@dataclass(frozen=True)
class MessageService:
    """Binds one message type to the inbox that should receive it."""

    name: str
    msg_type: str
    inbox: "queue.Queue[Any]"


class MessageRegistrar:
    """Routes inbound messages to the inbox registered for their type."""

    def __init__(self) -> None:
        self._services: dict[str, MessageService] = {}
        self._lock = threading.Lock()

    def register(self, *services: MessageService) -> None:
        """Register message services atomically.

        Raises
        ------
        RegistrationError
            If a type is already registered or repeated in *services*;
            nothing is registered in that case.
        """
        with self._lock:
            seen: set[str] = set()
            for service in services:
                if service.msg_type in self._services or service.msg_type in seen:
                    raise RegistrationError(
                        f"message service already registered for type {service.msg_type}"
                    )
                seen.add(service.msg_type)
            for service in services:
                self._services[service.msg_type] = service
        for service in services:
            logger.info("Registered message service %s for %s", service.name, service.msg_type)

    def unregister(self, name: str) -> None:
        with self._lock:
            for msg_type, service in list(self._services.items()):
                if service.name == name:
                    del self._services[msg_type]

    def services(self) -> list[MessageService]:
        with self._lock:
            return list(self._services.values())

    def route(self, message: DIDCommMessage) -> bool:
        """Queue *message* for the service registered for its type.

        Returns ``False`` when no service handles the type.
        """
        with self._lock:
            service = self._services.get(message.type)
        if service is None:
            logger.debug("No message service for type %s (id=%s)", message.type, message.id)
            return False
        service.inbox.put(message)
        return True


__all__ = [
    "InMemoryMessenger",
    "MessageRegistrar",
    "MessageService",
    "Messenger",
    "RegistrationError",
]
