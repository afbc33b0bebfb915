"""Input schemas for capabilities and their derivation from Python signatures."""

import inspect
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union, get_args, get_origin

from .errors import InvalidSchemaGenerator

CONTEXT_PARAMETER = "context"

_SIMPLE_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
    type(None): "null",
}


class InputSchema:
    """The arguments a capability accepts and the subset it requires.

    Only the presence of required keys is checked; individual argument
    values are not type-checked. ``required`` is not validated against
    ``properties`` here, so an inconsistent declaration only shows up
    when a call is made.
    """

    def __init__(
        self,
        properties: Optional[Mapping[Any, Any]] = None,
        required: Optional[Iterable[Any]] = None
    ):
        self.properties: Dict[str, Any] = {
            str(key): value for key, value in (properties or {}).items()
        }
        self.required: List[str] = []
        for key in required or []:
            if str(key) not in self.required:
                self.required.append(str(key))

    @classmethod
    def coerce(cls, value: Any, source: str = "Schema") -> "InputSchema":
        """Normalise a declared or resolved schema value.

        Args:
            value: An InputSchema, or a mapping with ``properties`` and
                ``required`` entries
            source: Prefix for the error message

        Raises:
            InvalidSchemaGenerator: If ``value`` has any other type, or its
                ``properties`` is not a mapping, or its ``required`` is not a
                list of names
        """
        if isinstance(value, InputSchema):
            return value
        if isinstance(value, Mapping):
            properties = value.get("properties")
            if properties is None:
                properties = {}
            elif not isinstance(properties, Mapping):
                raise InvalidSchemaGenerator(
                    f"{source} properties must be a mapping, got {type(properties).__name__}"
                )
            required = value.get("required")
            if required is None:
                required = []
            elif isinstance(required, str) or not isinstance(required, (list, tuple, set, frozenset)):
                raise InvalidSchemaGenerator(
                    f"{source} required must be a list of names, got {type(required).__name__}"
                )
            return cls(properties=properties, required=required)
        raise InvalidSchemaGenerator(
            f"{source} must return a mapping or InputSchema, got {type(value).__name__}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": dict(self.properties),
            "required": list(self.required),
        }

    def missing_required(self, arguments: Optional[Mapping[Any, Any]]) -> List[str]:
        """Required argument names absent from ``arguments``, in declared order."""
        present = {str(key) for key in (arguments or {})}
        return [name for name in self.required if name not in present]

    def has_missing_required(self, arguments: Optional[Mapping[Any, Any]]) -> bool:
        return bool(self.missing_required(arguments))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InputSchema):
            return NotImplemented
        return (
            self.properties == other.properties
            and set(self.required) == set(other.required)
        )

    def __repr__(self) -> str:
        return f"InputSchema(properties={self.properties!r}, required={self.required!r})"


def python_type_to_json_schema(python_type: Any) -> Dict[str, Any]:
    """Convert a Python type annotation to a JSON Schema fragment.

    Unknown types and ``Any`` map to the empty schema, which allows anything.
    """
    if isinstance(python_type, type) and python_type in _SIMPLE_TYPES:
        return {"type": _SIMPLE_TYPES[python_type]}

    origin = get_origin(python_type)
    args = get_args(python_type)

    if origin is Union:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == len(args):
            return {"oneOf": [python_type_to_json_schema(arg) for arg in args]}
        if len(members) == 1:
            schema = python_type_to_json_schema(members[0])
            if "type" not in schema:
                return {"oneOf": [schema, {"type": "null"}]}
            types = schema["type"] if isinstance(schema["type"], list) else [schema["type"]]
            schema["type"] = types + ["null"]
            return schema
        return {"oneOf": [python_type_to_json_schema(arg) for arg in args]}

    if origin is list:
        if args:
            return {"type": "array", "items": python_type_to_json_schema(args[0])}
        return {"type": "array"}

    if origin is dict:
        if len(args) == 2:
            return {"type": "object", "additionalProperties": python_type_to_json_schema(args[1])}
        return {"type": "object"}

    return {}


def generate_function_input_schema(func: Callable) -> InputSchema:
    """Derive an InputSchema from the keyword parameters of ``func``.

    Parameters without defaults are required. ``self``, ``context`` and
    variadic parameters are skipped.
    """
    properties = {}
    required = []

    for param_name, param in inspect.signature(func).parameters.items():
        if param_name in ("self", CONTEXT_PARAMETER):
            continue
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        annotation = param.annotation if param.annotation is not param.empty else Any
        properties[param_name] = python_type_to_json_schema(annotation)
        if param.default is param.empty:
            required.append(param_name)

    return InputSchema(properties=properties, required=required)
