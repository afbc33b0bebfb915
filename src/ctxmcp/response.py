"""Response envelopes for the JSON-RPC protocol."""

from enum import IntEnum
from typing import Any, Dict, Optional

JSONRPC_VERSION = "2.0"


class ErrorCodes(IntEnum):
    """Standard JSON-RPC error codes used in MCP."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class McpResponse:
    """Envelope builder for MCP protocol messages."""

    @staticmethod
    def success(request_id: Any, result: Any) -> Dict[str, Any]:
        """Create a successful response.

        Args:
            request_id: Id of the request being answered
            result: The result data

        Returns:
            JSON-RPC success envelope
        """
        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}

    @staticmethod
    def error(
        request_id: Any,
        code: int,
        message: str,
        data: Optional[Any] = None
    ) -> Dict[str, Any]:
        """Create an error response.

        Args:
            request_id: Id of the request being answered, or None
            code: Error code
            message: Error message
            data: Optional error data

        Returns:
            JSON-RPC error envelope
        """
        error_obj = {"code": int(code), "message": message}
        if data is not None:
            error_obj["data"] = data
        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error_obj}

    @staticmethod
    def from_exception(request_id: Any, exc: Exception) -> Dict[str, Any]:
        """Create an error response from an ``McpError``."""
        return McpResponse.error(request_id, exc.code, str(exc), exc.data)

    @staticmethod
    def internal_error(
        request_id: Any,
        message: str,
        data: Optional[Any] = None
    ) -> Dict[str, Any]:
        return McpResponse.error(request_id, ErrorCodes.INTERNAL_ERROR, message, data)

    @staticmethod
    def parse_error(message: str) -> Dict[str, Any]:
        return McpResponse.error(None, ErrorCodes.PARSE_ERROR, message)

    @staticmethod
    def notification(method: str, params: Optional[Any] = None) -> Dict[str, Any]:
        """Create a notification message (no id, no response expected)."""
        message = {"jsonrpc": JSONRPC_VERSION, "method": method}
        if params is not None:
            message["params"] = params
        return message
