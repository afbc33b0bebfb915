"""Shared machinery for tool and prompt definitions.

A capability wraps an implementation function together with its advertised
metadata. Each metadata field is stored independently as a ``Field``: unset,
a literal, or a resolver of the caller's context. Resolvers run again on
every resolution because the context can differ from one call to the next.

Definitions are configured before they are handed to a ``Server``. The
server freezes them on registration, after which assigning a field raises
``ConfigurationError``.
"""

import asyncio
import inspect
import re
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import ConfigurationError, InvalidArguments, InvocationFailure
from .field import UNSET, Field, Resolver, is_set, resolve, to_field
from .schema import CONTEXT_PARAMETER, InputSchema


def handle_from_identifier(identifier: str) -> str:
    """Turn ``AdminTool`` or ``admin-tool`` into ``admin_tool``."""
    handle = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", identifier)
    handle = re.sub(r"[^0-9A-Za-z_]+", "_", handle)
    return handle.strip("_").lower()


def _identifier_of(func: Callable) -> str:
    return getattr(func, "__name__", None) or type(func).__name__


class Capability:
    """Base class for named, invokable capabilities."""

    kind = "capability"

    def __init__(
        self,
        func: Callable,
        name: Any = UNSET,
        title: Any = UNSET,
        description: Any = UNSET,
        annotations: Any = UNSET
    ):
        if not callable(func):
            raise ConfigurationError(f"{self.kind} implementation must be callable")
        self.func = func
        self._frozen = False

        self._name: Field = UNSET if name is None else to_field(name)
        if isinstance(self._name, Resolver):
            raise ConfigurationError(f"{self.kind} names cannot depend on the context")
        if not is_set(self._name) and _identifier_of(func) == "<lambda>":
            raise ConfigurationError(f"A name is required for a lambda {self.kind}")

        self._title: Field = to_field(title)
        self._description: Field = to_field(description)
        self._annotations: Field = to_field(annotations)
        self.accepts_context = takes_context(func)

    def _assign(self, attribute: str, value: Any) -> None:
        if self._frozen:
            raise ConfigurationError(
                f"{self.kind} {self.name!r} is registered and can no longer be changed"
            )
        setattr(self, attribute, to_field(value))

    def freeze(self) -> "Capability":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def name(self) -> str:
        return resolve(self._name, default=handle_from_identifier(_identifier_of(self.func)))

    @property
    def title(self) -> Optional[str]:
        return self.resolve_title(None)

    @title.setter
    def title(self, value: Any) -> None:
        self._assign("_title", value)

    @property
    def description(self) -> Optional[str]:
        return self.resolve_description(None)

    @description.setter
    def description(self, value: Any) -> None:
        self._assign("_description", value)

    @property
    def annotations(self) -> Any:
        return self.resolve_annotations(None)

    @annotations.setter
    def annotations(self, value: Any) -> None:
        self._assign("_annotations", value)

    @property
    def input_schema(self) -> InputSchema:
        return self.resolve_input_schema(None)

    def resolve_title(self, context: Any = None) -> Optional[str]:
        return resolve(self._title, context)

    def resolve_description(self, context: Any = None) -> Optional[str]:
        return resolve(self._description, context)

    def resolve_annotations(self, context: Any = None) -> Any:
        value = resolve(self._annotations, context)
        if value is None:
            return None
        return self._coerce_annotations(value)

    def resolve_input_schema(self, context: Any = None) -> InputSchema:
        raise NotImplementedError

    def _coerce_annotations(self, value: Any) -> Any:
        return value

    def extend(self, **overrides: Any) -> "Capability":
        """Build a new definition bound to the same implementation.

        Only the fields passed in ``overrides`` are declared on the new
        definition. Every other field starts unset; the parent's literals
        and resolvers are not carried over.
        """
        return type(self)(overrides.pop("func", self.func), **overrides)

    def _descriptor(self, context: Any) -> Dict[str, Any]:
        descriptor = {"name": self.name}
        title = self.resolve_title(context)
        if title is not None:
            descriptor["title"] = title
        description = self.resolve_description(context)
        if description is not None:
            descriptor["description"] = description
        return descriptor

    def _validate(self, arguments: Mapping[str, Any], context: Any) -> None:
        missing = self.resolve_input_schema(context).missing_required(arguments)
        if missing:
            raise InvalidArguments(self.name, missing)

    def _invoke(self, arguments: Mapping[str, Any], context: Any) -> Any:
        kwargs = dict(arguments)
        if self.accepts_context:
            kwargs[CONTEXT_PARAMETER] = context
        try:
            if inspect.iscoroutinefunction(self.func):
                return asyncio.run(self.func(**kwargs))
            return self.func(**kwargs)
        except Exception as e:
            raise InvocationFailure(self.kind, self.name, e) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def takes_context(func: Callable) -> bool:
    try:
        parameters = inspect.signature(func).parameters
    except (TypeError, ValueError):
        return False
    if CONTEXT_PARAMETER in parameters:
        return True
    return any(param.kind is param.VAR_KEYWORD for param in parameters.values())
