"""ctxmcp - MCP servers whose capabilities depend on the caller's context."""

from .config import Configuration
from .errors import (
    ConfigurationError,
    InvalidArguments,
    InvalidParams,
    InvalidRequest,
    InvalidSchemaGenerator,
    InvocationFailure,
    McpError,
    MethodNotFound,
    NotFound,
    TransportDeliveryFailure,
)
from .field import UNSET, Literal, Resolver, Unset
from .prompts import Prompt, PromptArgument, PromptMessage, PromptResult, prompt
from .resources import Resource, resource
from .response import ErrorCodes, McpResponse
from .schema import InputSchema, generate_function_input_schema, python_type_to_json_schema
from .server import Server
from .tools import Tool, ToolAnnotations, ToolResponse, tool
from .transports import InProcessClientTransport, InProcessTransport, Transport, connect_in_process

__version__ = "0.1.0"

__all__ = [
    "Server",
    "Configuration",
    "Tool",
    "ToolAnnotations",
    "ToolResponse",
    "tool",
    "Prompt",
    "PromptArgument",
    "PromptMessage",
    "PromptResult",
    "prompt",
    "Resource",
    "resource",
    "InputSchema",
    "generate_function_input_schema",
    "python_type_to_json_schema",
    "UNSET",
    "Unset",
    "Literal",
    "Resolver",
    "McpResponse",
    "ErrorCodes",
    "McpError",
    "ConfigurationError",
    "InvalidSchemaGenerator",
    "NotFound",
    "InvalidArguments",
    "InvalidParams",
    "InvalidRequest",
    "InvocationFailure",
    "MethodNotFound",
    "TransportDeliveryFailure",
    "Transport",
    "InProcessTransport",
    "InProcessClientTransport",
    "connect_in_process",
]
