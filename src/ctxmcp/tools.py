"""Tool definitions for MCP servers."""

import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from .capability import Capability
from .errors import ConfigurationError
from .field import UNSET, Resolver, Unset, resolve
from .schema import InputSchema, generate_function_input_schema


@dataclass(frozen=True)
class ToolAnnotations:
    """Behavioural hints a client may show for a tool."""

    title: Optional[str] = None
    read_only_hint: Optional[bool] = None
    destructive_hint: Optional[bool] = None
    idempotent_hint: Optional[bool] = None
    open_world_hint: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        values = {
            "title": self.title,
            "readOnlyHint": self.read_only_hint,
            "destructiveHint": self.destructive_hint,
            "idempotentHint": self.idempotent_hint,
            "openWorldHint": self.open_world_hint,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass
class ToolResponse:
    """Result of a tool call."""

    content: List[Dict[str, Any]] = field(default_factory=list)
    is_error: bool = False
    structured_content: Optional[Any] = None

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolResponse":
        return cls([{"type": "text", "text": text}], is_error=is_error)

    @classmethod
    def from_result(cls, result: Any) -> "ToolResponse":
        """Normalise whatever an implementation returned."""
        if isinstance(result, ToolResponse):
            return result
        if isinstance(result, Mapping):
            response = cls.text(json.dumps(result, indent=2, default=str))
            response.structured_content = dict(result)
            return response
        if isinstance(result, (list, tuple)):
            return cls.text(json.dumps(list(result), indent=2, default=str))
        if result is None:
            return cls()
        return cls.text(str(result))

    def to_dict(self) -> Dict[str, Any]:
        result = {"content": list(self.content), "isError": self.is_error}
        if self.structured_content is not None:
            result["structuredContent"] = self.structured_content
        return result


class Tool(Capability):
    """Represents an MCP tool (function call capability).

    ``title``, ``description``, ``input_schema`` and ``annotations`` each take
    either a value or a function of the caller's context::

        def admin_schema(context):
            if (context or {}).get("user", {}).get("role") == "admin":
                return {"properties": {"target": {"type": "string"}}, "required": ["target"]}
            return {"properties": {}, "required": []}

        deploy = Tool(run_deploy, name="deploy", input_schema=admin_schema)
    """

    kind = "tool"

    def __init__(
        self,
        func: Callable,
        name: Any = UNSET,
        title: Any = UNSET,
        description: Any = UNSET,
        input_schema: Any = UNSET,
        annotations: Any = UNSET
    ):
        """Initialize a tool.

        Args:
            func: The implementation, called with the arguments as keywords
                (plus ``context=`` when it declares that parameter)
            name: Tool name (defaults to a slug of the function name)
            title: Display title, or resolver
            description: Description, or resolver
            input_schema: Mapping with ``properties``/``required``, an
                InputSchema, or a resolver returning either
            annotations: ToolAnnotations, a mapping of its fields, or resolver
        """
        super().__init__(func, name=name, title=title, description=description, annotations=annotations)
        self._input_schema = UNSET
        self._set_input_schema(input_schema)

    def _set_input_schema(self, value: Any) -> None:
        if value is None or isinstance(value, Unset):
            self._assign("_input_schema", UNSET)
        elif isinstance(value, (InputSchema, Mapping)):
            self._assign("_input_schema", InputSchema.coerce(value))
        elif callable(value):
            self._assign("_input_schema", value)
        else:
            raise ConfigurationError(
                f"input_schema must be a mapping, InputSchema or callable, got {type(value).__name__}"
            )

    @Capability.input_schema.setter
    def input_schema(self, value: Any) -> None:
        self._set_input_schema(value)

    def resolve_input_schema(self, context: Any = None) -> InputSchema:
        if isinstance(self._input_schema, Resolver):
            return InputSchema.coerce(self._input_schema(context), source="Schema generator")
        return resolve(self._input_schema, default=InputSchema())

    def _coerce_annotations(self, value: Any) -> ToolAnnotations:
        if isinstance(value, ToolAnnotations):
            return value
        if isinstance(value, Mapping):
            try:
                return ToolAnnotations(**value)
            except TypeError as e:
                raise ConfigurationError(f"Invalid annotations for tool {self.name}: {e}") from e
        raise ConfigurationError(
            f"Annotations must be a mapping or ToolAnnotations, got {type(value).__name__}"
        )

    def to_dict(self, context: Any = None) -> Dict[str, Any]:
        """Convert tool to its MCP descriptor for ``context``."""
        result = self._descriptor(context)
        result["inputSchema"] = self.resolve_input_schema(context).to_dict()
        annotations = self.resolve_annotations(context)
        if annotations is not None:
            result["annotations"] = annotations.to_dict()
        return result

    def call(self, arguments: Optional[Mapping[str, Any]] = None, context: Any = None) -> ToolResponse:
        """Validate ``arguments`` against the schema for ``context`` and run the tool.

        Raises:
            InvalidArguments: Required arguments are missing; the
                implementation is not invoked
            InvocationFailure: The implementation raised
            InvalidSchemaGenerator: The schema resolver returned a bad value
        """
        arguments = arguments or {}
        self._validate(arguments, context)
        return ToolResponse.from_result(self._invoke(arguments, context))

    @classmethod
    def from_function(cls, func: Callable, **fields: Any) -> "Tool":
        """Create a Tool whose description and schema default to the function's."""
        if "description" not in fields and func.__doc__:
            fields["description"] = inspect.cleandoc(func.__doc__)
        if "input_schema" not in fields:
            fields["input_schema"] = generate_function_input_schema(func)
        return cls(func, **fields)

    @classmethod
    def define(cls, func: Optional[Callable] = None, **fields: Any):
        """Build a tool inline, without a named declaration.

        Usable directly, ``Tool.define(name="echo", func=echo)``, or as a
        decorator, ``@Tool.define(name="echo", description="...")``.
        """
        if func is not None:
            return cls(func, **fields)

        def decorator(inner: Callable) -> "Tool":
            return cls(inner, **fields)
        return decorator


def tool(func_or_none: Optional[Callable] = None, **fields: Any):
    """Decorator turning a function into a Tool.

    Usage:
        @tool
        def greet(name: str) -> str:
            return f"Hello, {name}!"

        @tool(description=lambda context: "Admin tool" if is_admin(context) else "User tool")
        def manage(action: str, context=None) -> str:
            ...
    """
    if func_or_none is None:
        def decorator(func: Callable) -> Tool:
            return Tool.from_function(func, **fields)
        return decorator
    if callable(func_or_none):
        return Tool.from_function(func_or_none, **fields)
    raise TypeError("Invalid arguments to tool decorator")
