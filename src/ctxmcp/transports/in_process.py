"""Same-process transport pair.

The server side and the client side call each other directly and
synchronously: no queue, no thread, no serialization. ``handle_json_request``
is still available for parity with out-of-process transports.
"""

import itertools
import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from ..config import ExceptionReporter
from ..errors import TransportDeliveryFailure
from ..response import JSONRPC_VERSION, McpResponse
from .base import Transport

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[str, Optional[Any]], None]

MAX_RECORDED_NOTIFICATIONS = 1000


class InProcessTransport(Transport):
    """Server side of an in-process pair."""

    def __init__(
        self,
        server: Any,
        client_transport: Optional["InProcessClientTransport"] = None,
        exception_reporter: Optional[ExceptionReporter] = None
    ):
        super().__init__(server, exception_reporter=exception_reporter)
        self.client_transport = client_transport

    def open(self) -> None:
        # Requests are handled synchronously, so there is no loop to start.
        self._open = True

    def close(self) -> None:
        self._open = False

    def send_response(self, message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Return ``message`` as the call's result, or None once closed."""
        if not self._open:
            logger.debug("Dropping response on closed in-process transport")
            return None
        return message

    def send_notification(self, method: str, params: Optional[Any] = None) -> bool:
        if not self._open or self.client_transport is None:
            return False

        try:
            self.client_transport.receive_notification(method, params)
            return True
        except Exception as e:
            self.report_exception(e, {
                "error": "Failed to send notification in in-process transport",
                "method": method,
                "params": params,
            })
            return False


class InProcessClientTransport:
    """Client side of an in-process pair.

    Sends requests straight into the paired server transport and records
    the most recent ``max_notifications`` notifications it receives; older
    ones are discarded.
    """

    def __init__(
        self,
        on_notification: Optional[NotificationCallback] = None,
        max_notifications: int = MAX_RECORDED_NOTIFICATIONS
    ):
        self.server_transport: Optional[InProcessTransport] = None
        self.on_notification = on_notification
        self.notifications: Deque[Tuple[str, Optional[Any]]] = deque(maxlen=max_notifications)
        self._ids = itertools.count(1)

    def connect(self, server_transport: InProcessTransport) -> None:
        self.server_transport = server_transport
        server_transport.client_transport = self

    def _deliverable(self) -> InProcessTransport:
        if self.server_transport is None:
            raise TransportDeliveryFailure("Client transport is not connected")
        if not self.server_transport.is_open:
            raise TransportDeliveryFailure("Server transport is closed")
        return self.server_transport

    def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Send a request and return the server's response envelope.

        Raises:
            TransportDeliveryFailure: Not connected, or the server side is closed
        """
        server_transport = self._deliverable()
        message = {"jsonrpc": JSONRPC_VERSION, "id": next(self._ids), "method": method}
        if params is not None:
            message["params"] = params
        return server_transport.send_response(server_transport.handle_request(message))

    def notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        self._deliverable().handle_request(McpResponse.notification(method, params))

    def receive_notification(self, method: str, params: Optional[Any] = None) -> None:
        self.notifications.append((method, params))
        if self.on_notification is not None:
            self.on_notification(method, params)


def connect_in_process(
    server: Any,
    on_notification: Optional[NotificationCallback] = None,
    exception_reporter: Optional[ExceptionReporter] = None
) -> Tuple[InProcessTransport, InProcessClientTransport]:
    """Create, pair and open both sides of an in-process connection."""
    client_transport = InProcessClientTransport(on_notification=on_notification)
    server_transport = InProcessTransport(server, exception_reporter=exception_reporter)
    client_transport.connect(server_transport)
    server_transport.open()
    return server_transport, client_transport
