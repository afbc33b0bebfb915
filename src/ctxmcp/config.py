"""Server configuration loaded from ``CTXMCP_*`` environment variables."""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "2025-06-18"

ExceptionReporter = Callable[[BaseException, Dict[str, Any]], None]
InstrumentationCallback = Callable[[Dict[str, Any]], None]


def default_exception_reporter(exception: BaseException, context: Dict[str, Any]) -> None:
    """Log the exception with its traceback."""
    logger.error(
        f"{context.get('error', 'Unhandled error')}: {exception}",
        exc_info=(type(exception), exception, exception.__traceback__),
    )


class Configuration(BaseSettings):
    """Settings shared by a server and its transports.

    ``protocol_version`` reads ``CTXMCP_PROTOCOL_VERSION`` (or a ``.env``
    file); keyword arguments take precedence over the environment. The
    exception reporter and instrumentation callback are injected only.

    The exception reporter is called from whichever thread handles a
    request. Replacing it while requests are in flight is the caller's
    responsibility; nothing here is locked.
    """

    model_config = SettingsConfigDict(
        env_prefix="CTXMCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    exception_reporter: ExceptionReporter = Field(default=default_exception_reporter, exclude=True)
    instrumentation_callback: Optional[InstrumentationCallback] = Field(default=None, exclude=True)

    def report_exception(self, exception: BaseException, context: Dict[str, Any]) -> None:
        self.exception_reporter(exception, context)

    def instrument(self, data: Dict[str, Any]) -> None:
        if self.instrumentation_callback is not None:
            self.instrumentation_callback(data)
