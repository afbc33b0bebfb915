"""JSON-RPC dispatcher for context-dependent MCP capabilities.

A ``Server`` owns fixed registries of tools, prompts and resources plus the
context it was constructed with. Every listing and invocation resolves the
capabilities' context-dependent fields again, so two servers sharing the
same definitions but holding different contexts advertise and validate
differently.

Requests are handled one at a time on the caller's thread. The server holds
no locks; concurrent callers must provide their own serialisation.
"""

import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .capability import takes_context
from .config import Configuration
from .errors import (
    ConfigurationError,
    InvalidParams,
    InvalidRequest,
    InvocationFailure,
    McpError,
    MethodNotFound,
    NotFound,
)
from .field import Unset, UNSET
from .prompts import Prompt, PromptResult
from .resources import Resource, format_contents
from .response import ErrorCodes, JSONRPC_VERSION, McpResponse
from .schema import CONTEXT_PARAMETER
from .tools import Tool, ToolResponse

logger = logging.getLogger(__name__)

Handler = Callable[[Mapping[str, Any], Dict[str, Any]], Any]


class Server:
    """Routes protocol methods to capability listings and invocations."""

    def __init__(
        self,
        name: str = "ctxmcp-server",
        version: str = "0.1.0",
        tools: Iterable[Tool] = (),
        prompts: Iterable[Prompt] = (),
        resources: Iterable[Resource] = (),
        context: Any = None,
        title: Optional[str] = None,
        instructions: Optional[str] = None,
        resources_read_handler: Optional[Callable] = None,
        configuration: Optional[Configuration] = None
    ):
        """Initialize a server.

        Args:
            name: Server name reported by ``initialize``
            version: Server version reported by ``initialize``
            tools: Tool definitions, listed in this order
            prompts: Prompt definitions, listed in this order
            resources: Resources, listed in this order
            context: Opaque caller context forwarded to every resolver and
                implementation; never inspected by the server
            title: Optional display title for ``serverInfo``
            instructions: Optional instructions returned by ``initialize``
            resources_read_handler: Fallback for ``resources/read`` on
                resources without a bound function; called with the request
                params (and ``context=`` when accepted) and returning a list
                of contents
            configuration: Protocol version, exception reporter and
                instrumentation callback

        Raises:
            ConfigurationError: Two capabilities of one kind share a name
        """
        self.name = name
        self.version = version
        self.title = title
        self.instructions = instructions
        self.context = context
        self.configuration = configuration or Configuration()
        self.resources_read_handler = resources_read_handler

        self._tools = self._register(tools, lambda tool: tool.name, "tool")
        self._prompts = self._register(prompts, lambda prompt: prompt.name, "prompt")
        self._resources = self._register(resources, lambda resource: resource.uri, "resource")

        self._handlers: Dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "ping": self._handle_ping,
            "notifications/initialized": self._handle_initialized,
            "tools/list": self._handle_list_tools,
            "tools/call": self._handle_call_tool,
            "prompts/list": self._handle_list_prompts,
            "prompts/get": self._handle_get_prompt,
            "resources/list": self._handle_list_resources,
            "resources/read": self._handle_read_resource,
        }

    @staticmethod
    def _register(items: Iterable[Any], key: Callable[[Any], str], kind: str) -> "OrderedDict[str, Any]":
        registry: "OrderedDict[str, Any]" = OrderedDict()
        for item in items:
            item_key = key(item)
            if item_key in registry:
                raise ConfigurationError(f"Duplicate {kind}: {item_key}")
            if hasattr(item, "freeze"):
                item.freeze()
            registry[item_key] = item
        return registry

    @property
    def tools(self) -> List[Tool]:
        return list(self._tools.values())

    @property
    def prompts(self) -> List[Prompt]:
        return list(self._prompts.values())

    @property
    def resources(self) -> List[Resource]:
        return list(self._resources.values())

    @property
    def methods(self) -> List[str]:
        return list(self._handlers)

    def _context(self, context: Any) -> Any:
        return self.context if isinstance(context, Unset) else context

    # Capability operations

    def list_tools(self, context: Any = UNSET) -> List[Dict[str, Any]]:
        """Descriptors of every tool for ``context``, in registration order.

        A failing resolver aborts the whole listing.
        """
        context = self._context(context)
        return [tool.to_dict(context) for tool in self._tools.values()]

    def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None, context: Any = UNSET) -> ToolResponse:
        """Call a tool by name after validating against its resolved schema.

        Raises:
            NotFound: No tool has this name
            InvalidArguments: Required arguments are missing
            InvocationFailure: The tool implementation raised
        """
        tool = self._tools.get(name)
        if tool is None:
            raise NotFound("tool", name)
        return tool.call(arguments or {}, self._context(context))

    def list_prompts(self, context: Any = UNSET) -> List[Dict[str, Any]]:
        context = self._context(context)
        return [prompt.to_dict(context) for prompt in self._prompts.values()]

    def get_prompt(self, name: str, arguments: Optional[Mapping[str, Any]] = None, context: Any = UNSET) -> PromptResult:
        prompt = self._prompts.get(name)
        if prompt is None:
            raise NotFound("prompt", name)
        return prompt.get(arguments or {}, self._context(context))

    def list_resources(self) -> List[Dict[str, Any]]:
        return [resource.to_dict() for resource in self._resources.values()]

    def read_resource(self, uri: str, context: Any = UNSET) -> Dict[str, Any]:
        """Read a resource through its function or the server's read handler."""
        context = self._context(context)
        resource = self._resources.get(uri)
        if resource is not None and resource.readable:
            return resource.read(context)
        if self.resources_read_handler is None:
            raise NotFound("resource", uri)

        kwargs = {CONTEXT_PARAMETER: context} if takes_context(self.resources_read_handler) else {}
        try:
            contents = self.resources_read_handler({"uri": uri}, **kwargs)
        except Exception as e:
            raise InvocationFailure("resource", uri, e) from e
        mime_type = resource.mime_type if resource is not None else None
        if isinstance(contents, Mapping):
            contents = [contents]
        elif not isinstance(contents, list):
            contents = [format_contents(uri, mime_type, contents)]
        return {"contents": contents}

    # Protocol entry points

    def handle(self, request: Any) -> Optional[Dict[str, Any]]:
        """Handle one parsed JSON-RPC message.

        Returns the response envelope, or None for notifications. Errors
        never propagate: they are returned as error envelopes.
        """
        if not isinstance(request, Mapping):
            return McpResponse.error(None, ErrorCodes.INVALID_REQUEST, "Invalid Request")

        is_notification = "id" not in request
        request_id = request.get("id")
        method = request.get("method")
        data: Dict[str, Any] = {"method": method}
        started = time.monotonic()

        try:
            if request.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str):
                raise InvalidRequest("Invalid Request")
            params = request.get("params")
            if params is None:
                params = {}
            if not isinstance(params, Mapping):
                raise InvalidParams("Params must be an object")

            handler = self._handlers.get(method)
            if handler is None:
                raise MethodNotFound(method)

            logger.debug(f"Handling {method} (id={request_id})")
            response = McpResponse.success(request_id, handler(params, data))
        except McpError as e:
            data["error"] = type(e).__name__
            if isinstance(e, InvocationFailure):
                logger.warning(f"{e}: {e.cause!r}")
            elif isinstance(e, ConfigurationError):
                self._report(e, method, request_id, "Configuration error while handling request")
            response = McpResponse.from_exception(request_id, e)
        except Exception as e:
            data["error"] = type(e).__name__
            self._report(e, method, request_id, "Unexpected error while handling request")
            response = McpResponse.internal_error(
                request_id, "Internal error", {"type": type(e).__name__, "detail": str(e)}
            )

        data["duration"] = time.monotonic() - started
        self._instrument(data)

        if is_notification:
            return None
        return response

    def handle_json(self, payload: Any) -> Optional[str]:
        """Handle a serialized message or batch; returns the serialized reply."""
        try:
            request = json.loads(payload)
        except (TypeError, ValueError) as e:
            return self._dump(McpResponse.parse_error(f"Parse error: {e}"))

        if isinstance(request, list):
            if not request:
                return self._dump(McpResponse.error(None, ErrorCodes.INVALID_REQUEST, "Invalid Request"))
            responses = [response for response in map(self.handle, request) if response is not None]
            return self._dump(responses) if responses else None

        response = self.handle(request)
        return None if response is None else self._dump(response)

    def _dump(self, message: Any) -> str:
        try:
            return json.dumps(message)
        except (TypeError, ValueError) as e:
            self._report(e, None, None, "Response is not JSON serializable")
            request_id = message.get("id") if isinstance(message, Mapping) else None
            return json.dumps(McpResponse.internal_error(request_id, "Internal error"))

    def _report(self, exception: BaseException, method: Any, request_id: Any, message: str) -> None:
        try:
            self.configuration.report_exception(
                exception, {"error": message, "method": method, "id": request_id}
            )
        except Exception:
            logger.exception("Exception reporter failed")

    def _instrument(self, data: Dict[str, Any]) -> None:
        try:
            self.configuration.instrument(data)
        except Exception as e:
            self._report(e, data.get("method"), None, "Instrumentation callback failed")

    # Method handlers

    def _handle_initialize(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        if requested and requested != self.configuration.protocol_version:
            logger.debug(
                f"Client requested protocol {requested}, "
                f"answering with {self.configuration.protocol_version}"
            )

        server_info = {"name": self.name, "version": self.version}
        if self.title:
            server_info["title"] = self.title
        result = {
            "protocolVersion": self.configuration.protocol_version,
            "capabilities": {
                "tools": {"listChanged": False},
                "prompts": {"listChanged": False},
                "resources": {"listChanged": False, "subscribe": False},
            },
            "serverInfo": server_info,
        }
        if self.instructions:
            result["instructions"] = self.instructions
        return result

    def _handle_ping(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    def _handle_initialized(self, params: Mapping[str, Any], data: Dict[str, Any]) -> None:
        logger.debug(f"Client initialized for server {self.name}")
        return None

    def _handle_list_tools(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": self.list_tools()}

    def _handle_call_tool(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        name = _required_name(params, "name")
        data["tool_name"] = name
        return self.call_tool(name, _arguments(params)).to_dict()

    def _handle_list_prompts(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        return {"prompts": self.list_prompts()}

    def _handle_get_prompt(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        name = _required_name(params, "name")
        data["prompt_name"] = name
        return self.get_prompt(name, _arguments(params)).to_dict()

    def _handle_list_resources(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        return {"resources": self.list_resources()}

    def _handle_read_resource(self, params: Mapping[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        uri = _required_name(params, "uri")
        data["resource_uri"] = uri
        return self.read_resource(uri)

    def __repr__(self) -> str:
        return (
            f"Server(name='{self.name}', "
            f"tools={len(self._tools)}, "
            f"prompts={len(self._prompts)}, "
            f"resources={len(self._resources)})"
        )


def _required_name(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidParams(f"Missing required parameter: {key}")
    return value


def _arguments(params: Mapping[str, Any]) -> Mapping[str, Any]:
    arguments = params.get("arguments")
    if arguments is None:
        return {}
    if not isinstance(arguments, Mapping):
        raise InvalidParams("arguments must be an object")
    return arguments
