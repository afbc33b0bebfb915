"""Values that are either unset, a literal, or resolved from a context."""

from dataclasses import dataclass
from typing import Any, Callable, Union


@dataclass(frozen=True)
class Unset:
    """A field that was never declared."""


@dataclass(frozen=True)
class Literal:
    """A field declared with a fixed value (``None`` and ``False`` included)."""

    value: Any


@dataclass(frozen=True)
class Resolver:
    """A field computed from the caller's context on every resolution."""

    func: Callable[[Any], Any]

    def __call__(self, context: Any) -> Any:
        return self.func(context)


Field = Union[Unset, Literal, Resolver]

UNSET = Unset()


def to_field(value: Any) -> Field:
    """Wrap a declared value into a field.

    Callables become resolvers; everything else, including ``None``,
    becomes a literal.
    """
    if isinstance(value, (Unset, Literal, Resolver)):
        return value
    if callable(value):
        return Resolver(value)
    return Literal(value)


def resolve(field: Field, context: Any = None, default: Any = None) -> Any:
    """Return the value of ``field`` for ``context``.

    Resolvers run on every call; nothing is cached between calls.
    """
    if isinstance(field, Resolver):
        return field(context)
    if isinstance(field, Literal):
        return field.value
    return default


def is_set(field: Field) -> bool:
    return not isinstance(field, Unset)
