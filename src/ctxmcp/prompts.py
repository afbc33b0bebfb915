"""Prompt definitions for MCP servers."""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .capability import Capability
from .errors import ConfigurationError, InvocationFailure
from .field import UNSET, resolve
from .schema import CONTEXT_PARAMETER, InputSchema


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: Optional[str] = None
    required: bool = False
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"name": self.name, "required": self.required}
        if self.title is not None:
            result["title"] = self.title
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass
class PromptMessage:
    role: str
    content: Union[str, Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        content = self.content
        if isinstance(content, str):
            content = {"type": "text", "text": content}
        return {"role": self.role, "content": content}


@dataclass
class PromptResult:
    messages: List[PromptMessage] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"messages": [message.to_dict() for message in self.messages]}
        if self.description is not None:
            result["description"] = self.description
        return result


class Prompt(Capability):
    """Represents an MCP prompt template.

    ``arguments`` may be a list of PromptArgument (or mappings of its
    fields) or a function of the context returning such a list. The input
    schema used to validate ``prompts/get`` is derived from the resolved
    arguments.
    """

    kind = "prompt"

    def __init__(
        self,
        func: Callable,
        name: Any = UNSET,
        title: Any = UNSET,
        description: Any = UNSET,
        arguments: Any = UNSET,
        annotations: Any = UNSET
    ):
        super().__init__(func, name=name, title=title, description=description, annotations=annotations)
        self._arguments = UNSET
        self.arguments = arguments

    @property
    def arguments(self) -> List[PromptArgument]:
        return self.resolve_arguments(None)

    @arguments.setter
    def arguments(self, value: Any) -> None:
        self._assign("_arguments", UNSET if value is None else value)

    def resolve_arguments(self, context: Any = None) -> List[PromptArgument]:
        declared = resolve(self._arguments, context, default=[])
        if not isinstance(declared, (list, tuple)):
            raise ConfigurationError(
                f"Prompt arguments must be a list, got {type(declared).__name__}"
            )
        return [self._coerce_argument(argument) for argument in declared]

    @staticmethod
    def _coerce_argument(argument: Any) -> PromptArgument:
        if isinstance(argument, PromptArgument):
            return argument
        if isinstance(argument, Mapping):
            try:
                return PromptArgument(**argument)
            except TypeError as e:
                raise ConfigurationError(f"Invalid prompt argument: {e}") from e
        raise ConfigurationError(
            f"Prompt argument must be a mapping or PromptArgument, got {type(argument).__name__}"
        )

    def resolve_input_schema(self, context: Any = None) -> InputSchema:
        arguments = self.resolve_arguments(context)
        properties = {}
        for argument in arguments:
            properties[argument.name] = (
                {"description": argument.description} if argument.description else {}
            )
        return InputSchema(
            properties=properties,
            required=[argument.name for argument in arguments if argument.required],
        )

    def to_dict(self, context: Any = None) -> Dict[str, Any]:
        """Convert prompt to MCP prompt format for ``context``."""
        result = self._descriptor(context)
        result["arguments"] = [argument.to_dict() for argument in self.resolve_arguments(context)]
        annotations = self.resolve_annotations(context)
        if annotations is not None:
            result["annotations"] = annotations
        return result

    def _coerce_annotations(self, value: Any) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            raise ConfigurationError(
                f"Prompt annotations must be a mapping, got {type(value).__name__}"
            )
        return dict(value)

    def get(self, arguments: Optional[Mapping[str, Any]] = None, context: Any = None) -> PromptResult:
        """Render the prompt for ``arguments`` and ``context``.

        Raises:
            InvalidArguments: A required prompt argument is missing
            InvocationFailure: The template raised or returned an unusable value
        """
        arguments = arguments or {}
        self._validate(arguments, context)
        rendered = self._invoke(arguments, context)
        try:
            result = self._to_result(rendered)
        except TypeError as e:
            raise InvocationFailure(self.kind, self.name, e) from e
        if result.description is None:
            result.description = self.resolve_description(context)
        return result

    @staticmethod
    def _to_result(rendered: Any) -> PromptResult:
        if isinstance(rendered, PromptResult):
            return rendered
        if isinstance(rendered, (PromptMessage, str)):
            rendered = [rendered]
        if not isinstance(rendered, (list, tuple)):
            raise TypeError(f"Prompt must return a list of messages, got {type(rendered).__name__}")

        messages = []
        for message in rendered:
            if isinstance(message, PromptMessage):
                messages.append(message)
            elif isinstance(message, str):
                messages.append(PromptMessage(role="user", content=message))
            elif isinstance(message, Mapping) and "role" in message and "content" in message:
                messages.append(PromptMessage(role=message["role"], content=message["content"]))
            else:
                raise TypeError("Invalid message format in prompt")
        return PromptResult(messages=messages)

    @classmethod
    def from_function(cls, func: Callable, **fields: Any) -> "Prompt":
        """Create a Prompt whose description and arguments default to the function's."""
        if "description" not in fields and func.__doc__:
            fields["description"] = inspect.cleandoc(func.__doc__)
        if "arguments" not in fields:
            fields["arguments"] = [
                PromptArgument(name=param_name, required=param.default is param.empty)
                for param_name, param in inspect.signature(func).parameters.items()
                if param_name != CONTEXT_PARAMETER
                and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
            ]
        return cls(func, **fields)

    @classmethod
    def define(cls, func: Optional[Callable] = None, **fields: Any):
        """Build a prompt inline; see ``Tool.define``."""
        if func is not None:
            return cls(func, **fields)

        def decorator(inner: Callable) -> "Prompt":
            return cls(inner, **fields)
        return decorator


def prompt(func_or_none: Optional[Callable] = None, **fields: Any):
    """Decorator turning a function into a Prompt.

    Usage:
        @prompt
        def code_review(code: str) -> list:
            return [{"role": "user", "content": f"Review this code: {code}"}]
    """
    if func_or_none is None:
        def decorator(func: Callable) -> Prompt:
            return Prompt.from_function(func, **fields)
        return decorator
    if callable(func_or_none):
        return Prompt.from_function(func_or_none, **fields)
    raise TypeError("Invalid arguments to prompt decorator")
