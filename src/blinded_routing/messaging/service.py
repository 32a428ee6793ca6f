"""RoutingService — blinded-routing handshake over DIDComm messages.

Protocol
--------
1. ``diddoc-req``: create a peer DID whose only service is our endpoint,
   remember ``message id -> DID`` in the transaction store, reply with the
   DID document.
2. ``register-route-req`` (threaded on step 1 via ``~thread.pthid``): parse
   the requester's DID document, look up our DID for the parent thread,
   create a connection between the two and register it with the mediator.

Every inbound message gets exactly one reply, either the typed response or
an :class:`~blinded_routing.messaging.models.ErrorResponse` tagged with the
paired response type. Messages are processed one at a time, in arrival
order, by a single worker thread started at construction.

Partial failures are not compensated: a transaction written before a later
step fails stays in the store until a retried request overwrites it.
"""
from __future__ import annotations

import logging
import queue
import threading
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from blinded_routing.connections.didexchange import DIDExchangeClient
from blinded_routing.connections.mediator import MediatorClient
from blinded_routing.did.document import DIDDocumentError, ServiceEndpoint
from blinded_routing.did.registry import VDRRegistry
from blinded_routing.messaging.errors import (
    ConnectionCreationError,
    DecodeError,
    IdentityCreationError,
    MediationError,
    NotFoundError,
    ParseError,
    ReplayError,
    ReplyDeliveryError,
    RoutingError,
    SerializationError,
    ServiceClosedError,
    StoreError,
    UnsupportedMessageError,
    ValidationError,
)
from blinded_routing.messaging.models import (
    ConnRequest,
    ConnResponse,
    DIDCommMessage,
    DIDDocData,
    DIDDocResponse,
    ErrorData,
    ErrorResponse,
)
from blinded_routing.messaging.transport import MessageRegistrar, MessageService, Messenger
from blinded_routing.messaging.types import (
    DIDDOC_REQ,
    REGISTER_ROUTE_REQ,
    MessageKind,
    response_type_for,
)
from blinded_routing.storage.base import (
    KeyNotFoundError,
    StorageError,
    StorageProvider,
    ensure_store,
)

TXN_STORE_NAME: str = "msgsvc_txn"
# parent thread id -> connection id, once the route is registered
ROUTED_STORE_SUFFIX: str = "_routed"
PEER_DID_METHOD: str = "peer"

_CLOSED = object()


class ReplayPolicy(str, Enum):
    """What to do with a second registration for the same parent thread."""

    ALLOW = "allow"
    REJECT = "reject"


class RoutingService:
    """Coordinates the two-step blinded-routing handshake.

    Parameters
    ----------
    vdr:
        Creates our peer DIDs and parses the requester's documents.
    didexchange:
        Creates the connection once both DIDs are known.
    mediator:
        Registers routing for the new connection.
    messenger:
        Sends replies.
    transient_store:
        Provider holding the transaction store.
    service_endpoint:
        Our reachable endpoint, advertised in every created DID document.
    registrar:
        Optional registrar; when given, both request types are bound to
        this service's inbox.
    txn_store_name:
        Namespace of the transaction store. Completed registrations are
        recorded in ``<txn_store_name>_routed`` on the same provider.
    replay_policy:
        Handling of repeated registrations for one parent thread. Replays
        are detected from the routed store, so they are recognised across
        restarts when the provider persists.
    inbox_size:
        Maximum queued messages; ``0`` means unbounded.
    logger:
        Logger for per-message outcomes. Defaults to this module's logger.

    Raises
    ------
    StoreError
        If the transaction or routed store cannot be created or opened.
    """

    def __init__(
        self,
        *,
        vdr: VDRRegistry,
        didexchange: DIDExchangeClient,
        mediator: MediatorClient,
        messenger: Messenger,
        transient_store: StorageProvider,
        service_endpoint: str,
        registrar: MessageRegistrar | None = None,
        txn_store_name: str = TXN_STORE_NAME,
        replay_policy: ReplayPolicy = ReplayPolicy.ALLOW,
        inbox_size: int = 1,
        logger: logging.Logger | None = None,
    ) -> None:
        try:
            self._txn_store = ensure_store(transient_store, txn_store_name)
            self._routed_store = ensure_store(
                transient_store, txn_store_name + ROUTED_STORE_SUFFIX
            )
        except StorageError as exc:
            raise StoreError(f"store: {exc}") from exc

        self._vdr = vdr
        self._didexchange = didexchange
        self._mediator = mediator
        self._messenger = messenger
        self._endpoint = service_endpoint
        self._replay_policy = ReplayPolicy(replay_policy)
        self._logger = logger or logging.getLogger(__name__)
        self._replay_count = 0
        self._closed = False
        self._state_lock = threading.Lock()

        self._inbox: queue.Queue[Any] = queue.Queue(maxsize=inbox_size)
        self._registrar = registrar
        if registrar is not None:
            registrar.register(
                MessageService("diddoc-req", DIDDOC_REQ, self._inbox),
                MessageService("register-route-req", REGISTER_ROUTE_REQ, self._inbox),
            )

        self._worker = threading.Thread(
            target=self._listen, name="routing-service", daemon=True
        )
        self._worker.start()

    # ------------------------------------------------------------------
    # Inbox lifecycle
    # ------------------------------------------------------------------

    def submit(self, message: DIDCommMessage) -> None:
        """Queue *message* for processing, blocking while the inbox is full.

        Raises
        ------
        ServiceClosedError
            If :meth:`close` was called.
        """
        with self._state_lock:
            if self._closed:
                raise ServiceClosedError("routing service is closed")
            self._inbox.put(message)

    def close(self) -> None:
        """Stop accepting messages; the worker exits after draining the inbox.

        Calling ``close`` more than once has no further effect.
        """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            if self._registrar is not None:
                self._registrar.unregister("diddoc-req")
                self._registrar.unregister("register-route-req")
            self._inbox.put(_CLOSED)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker to exit. Returns ``True`` if it did."""
        self._worker.join(timeout)
        return not self._worker.is_alive()

    @property
    def running(self) -> bool:
        return self._worker.is_alive()

    @property
    def replay_count(self) -> int:
        """Registrations accepted for a parent thread that was already routed."""
        return self._replay_count

    def _listen(self) -> None:
        while True:
            message = self._inbox.get()
            try:
                if message is _CLOSED:
                    return
                self.process(message)
            finally:
                self._inbox.task_done()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def process(self, message: DIDCommMessage) -> bool:
        """Handle *message* and send its reply.

        Returns ``True`` when the reply was delivered. Delivery failures are
        logged and never retried.
        """
        reply = self.handle(message)
        try:
            self._send_reply(message.id, reply)
        except ReplyDeliveryError as exc:
            self._logger.error(
                "sendReply : msgType=[%s] id=[%s] errMsg=[%s]", message.type, message.id, exc
            )
            return False

        self._logger.info("msgType=[%s] id=[%s] msg=[%s]", message.type, message.id, "success")
        return True

    def _send_reply(self, message_id: str, reply: dict[str, Any]) -> None:
        try:
            self._messenger.reply_to(message_id, reply)
        except ReplyDeliveryError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ReplyDeliveryError(f"reply to {message_id} : {exc}") from exc

    def handle(self, message: DIDCommMessage) -> dict[str, Any]:
        """Run the handler for *message* and return the reply payload."""
        kind = MessageKind.classify(message.type)
        try:
            if kind is MessageKind.DIDDOC_REQUEST:
                response = self._handle_diddoc_req(message)
            elif kind is MessageKind.REGISTER_ROUTE_REQUEST:
                response = self._handle_conn_req(message)
            else:
                raise UnsupportedMessageError(message.type)
        except RoutingError as exc:
            return self._error_reply(message, str(exc))
        except Exception as exc:  # noqa: BLE001
            self._logger.exception("Unexpected failure handling message %s", message.id)
            return self._error_reply(message, f"internal error : {exc}")

        return response.to_message()

    def _error_reply(self, message: DIDCommMessage, error_msg: str) -> dict[str, Any]:
        self._logger.error(
            "msgType=[%s] id=[%s] errMsg=[%s]", message.type, message.id, error_msg
        )
        return ErrorResponse(
            type=response_type_for(message.type),
            data=ErrorData(error_msg=error_msg),
        ).to_message()

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_diddoc_req(self, message: DIDCommMessage) -> DIDDocResponse:
        try:
            did_doc = self._vdr.create(
                PEER_DID_METHOD, services=[ServiceEndpoint(endpoint=self._endpoint)]
            )
        except Exception as exc:  # noqa: BLE001
            raise IdentityCreationError(f"create new peer did : {exc}") from exc

        try:
            self._txn_store.put(message.id, did_doc.id.encode("utf-8"))
        except StorageError as exc:
            raise StoreError(f"save txn data : {exc}") from exc

        # the transaction stays even if serialization fails below
        try:
            doc_bytes = did_doc.to_json_bytes()
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"marshal did doc : {exc}") from exc

        return DIDDocResponse(data=DIDDocData(did_doc=doc_bytes))

    def _handle_conn_req(self, message: DIDCommMessage) -> ConnResponse:
        try:
            request = message.decode(ConnRequest)
        except PydanticValidationError as exc:
            raise DecodeError(f"parse didcomm message : {exc}") from exc

        parent_thread_id = message.parent_thread_id
        if not parent_thread_id:
            raise ValidationError("parent thread id mandatory")

        if request.data is None or request.data.did_doc is None:
            raise ValidationError("did document mandatory")

        try:
            their_doc = self._vdr.parse_document(request.data.did_doc)
        except DIDDocumentError as exc:
            raise ParseError(f"parse did doc : {exc}") from exc

        try:
            my_did = self._txn_store.get(parent_thread_id).decode("utf-8")
        except KeyNotFoundError as exc:
            raise NotFoundError(f"fetch txn data : {exc}") from exc
        except (StorageError, UnicodeDecodeError) as exc:
            raise StoreError(f"fetch txn data : {exc}") from exc

        if self._is_routed(parent_thread_id):
            if self._replay_policy is ReplayPolicy.REJECT:
                raise ReplayError(parent_thread_id)
            self._replay_count += 1
            self._logger.warning(
                "Replayed route registration: pthid=[%s] id=[%s]", parent_thread_id, message.id
            )

        try:
            connection_id = self._didexchange.create_connection(my_did, their_doc)
        except Exception as exc:  # noqa: BLE001
            raise ConnectionCreationError(f"create connection : {exc}") from exc

        try:
            self._mediator.register(connection_id)
        except Exception as exc:  # noqa: BLE001
            raise MediationError(f"route registration : {exc}") from exc

        try:
            self._routed_store.put(parent_thread_id, connection_id.encode("utf-8"))
        except StorageError as exc:
            raise StoreError(f"save route data : {exc}") from exc

        return ConnResponse()

    def _is_routed(self, parent_thread_id: str) -> bool:
        try:
            self._routed_store.get(parent_thread_id)
        except KeyNotFoundError:
            return False
        except StorageError as exc:
            raise StoreError(f"fetch route data : {exc}") from exc
        return True


__all__ = [
    "PEER_DID_METHOD",
    "ROUTED_STORE_SUFFIX",
    "ReplayPolicy",
    "RoutingService",
    "TXN_STORE_NAME",
]
