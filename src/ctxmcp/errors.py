"""Exception taxonomy for capability resolution, dispatch and transports."""

from typing import Any, Iterable, List, Optional

from .response import ErrorCodes


class McpError(Exception):
    """Base class for errors that map onto a JSON-RPC error object."""

    code = ErrorCodes.INTERNAL_ERROR

    @property
    def data(self) -> Optional[Any]:
        return None


class ConfigurationError(McpError):
    """A capability was declared or resolved with a value of the wrong shape.

    This is a programmer error and is never retried.
    """


class InvalidSchemaGenerator(ConfigurationError, TypeError):
    """A schema resolver returned neither a mapping nor an InputSchema."""


class NotFound(McpError):
    """No capability is registered under the requested name or URI."""

    code = ErrorCodes.INVALID_PARAMS

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind.capitalize()} not found: {name}")
        self.kind = kind
        self.name = name


class InvalidArguments(McpError):
    """Required arguments of the resolved schema are missing."""

    code = ErrorCodes.INVALID_PARAMS

    def __init__(self, name: str, missing: Iterable[str]):
        self.name = name
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Missing required arguments for {name}: {', '.join(self.missing)}"
        )

    @property
    def data(self) -> Optional[Any]:
        return {"missing": self.missing}


class InvocationFailure(McpError):
    """The bound implementation of a capability raised."""

    code = ErrorCodes.INTERNAL_ERROR

    def __init__(self, kind: str, name: str, cause: BaseException):
        super().__init__(f"Internal error calling {kind} {name}")
        self.kind = kind
        self.name = name
        self.cause = cause

    @property
    def data(self) -> Optional[Any]:
        return {"type": type(self.cause).__name__, "detail": str(self.cause)}


class MethodNotFound(McpError):
    """The top-level protocol method is not routed by the server."""

    code = ErrorCodes.METHOD_NOT_FOUND

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParams(McpError):
    """The params of a routed method are missing or of the wrong shape."""

    code = ErrorCodes.INVALID_PARAMS


class InvalidRequest(McpError):
    """The request envelope itself is malformed."""

    code = ErrorCodes.INVALID_REQUEST


class TransportDeliveryFailure(McpError):
    """A message could not be delivered over a closed or unpaired transport."""
