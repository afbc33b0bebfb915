"""Transport contract shared by every way of reaching a server."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from ..config import ExceptionReporter

if TYPE_CHECKING:
    from ..server import Server

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Feeds requests into a server and carries messages back to the caller.

    Subclasses decide how messages travel. ``handle_request`` and
    ``handle_json_request`` only use the server's public entry points.
    """

    def __init__(self, server: "Server", exception_reporter: Optional[ExceptionReporter] = None):
        self.server = server
        self._exception_reporter = exception_reporter
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @abstractmethod
    def open(self) -> None:
        """Mark the transport ready to exchange messages. Idempotent."""

    @abstractmethod
    def close(self) -> None:
        """Mark the transport closed. Idempotent; later sends fail quietly."""

    @abstractmethod
    def send_response(self, message: Dict[str, Any]) -> Any:
        """Deliver a computed response toward the caller."""

    @abstractmethod
    def send_notification(self, method: str, params: Optional[Any] = None) -> bool:
        """Deliver a notification; returns whether delivery succeeded."""

    def handle_request(self, request: Any) -> Optional[Dict[str, Any]]:
        return self.server.handle(request)

    def handle_json_request(self, request: Any) -> Optional[str]:
        return self.server.handle_json(request)

    def report_exception(self, exception: BaseException, context: Dict[str, Any]) -> None:
        """Pass ``exception`` to the injected reporter, or the server's."""
        reporter = self._exception_reporter or self.server.configuration.exception_reporter
        try:
            reporter(exception, context)
        except Exception:
            logger.exception("Exception reporter failed")
