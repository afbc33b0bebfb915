"""Tests for the schema module."""

import pytest
from typing import Any, Dict, List, Optional, Union

from ctxmcp.errors import ConfigurationError, InvalidSchemaGenerator
from ctxmcp.schema import InputSchema, generate_function_input_schema, python_type_to_json_schema


class TestInputSchema:
    """Test InputSchema."""

    def test_to_dict(self):
        """Test the canonical form."""
        schema = InputSchema(properties={"name": {"type": "string"}}, required=["name"])
        assert schema.to_dict() == {
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        }

    def test_empty_schema(self):
        """Test the default schema accepts any arguments."""
        schema = InputSchema()
        assert schema.to_dict() == {"type": "object", "properties": {}, "required": []}
        assert schema.missing_required({}) == []
        assert not schema.has_missing_required({"anything": 1})

    def test_missing_required(self):
        """Test missing required is required minus the argument keys."""
        schema = InputSchema(properties={"action": {"type": "string"}}, required=["action"])
        assert schema.missing_required({}) == ["action"]
        assert schema.has_missing_required({})
        assert schema.missing_required({"action": "x"}) == []
        assert not schema.has_missing_required({"action": "x"})

    def test_missing_required_multiple(self):
        """Test several missing keys are all reported."""
        schema = InputSchema(
            properties={"secret_action": {}, "target": {}},
            required=["secret_action", "target"],
        )
        assert sorted(schema.missing_required({"action": "list"})) == ["secret_action", "target"]
        assert schema.missing_required({"target": "prod"}) == ["secret_action"]

    def test_missing_required_does_not_mutate(self):
        """Test the check leaves arguments and schema untouched."""
        schema = InputSchema(properties={"a": {}}, required=["a"])
        arguments = {"b": 1}
        schema.missing_required(arguments)
        assert arguments == {"b": 1}
        assert schema.required == ["a"]

    def test_required_not_enforced_against_properties(self):
        """Test required names outside properties are accepted at construction."""
        schema = InputSchema(properties={}, required=["ghost"])
        assert schema.missing_required({}) == ["ghost"]

    def test_equality_ignores_required_order(self):
        """Test equality compares required as a set."""
        first = InputSchema(properties={"a": {}, "b": {}}, required=["a", "b"])
        second = InputSchema(properties={"b": {}, "a": {}}, required=["b", "a"])
        assert first == second
        assert first != InputSchema(properties={"a": {}, "b": {}}, required=["a"])

    def test_coerce_mapping(self):
        """Test mappings are normalised into InputSchema."""
        schema = InputSchema.coerce({"properties": {"msg": {"type": "string"}}, "required": ["msg"]})
        assert isinstance(schema, InputSchema)
        assert schema.required == ["msg"]

    def test_coerce_partial_mapping(self):
        """Test missing entries default to empty."""
        assert InputSchema.coerce({}) == InputSchema()
        assert InputSchema.coerce({"required": ["x"]}).properties == {}

    def test_coerce_instance(self):
        """Test an InputSchema passes through unchanged."""
        schema = InputSchema(properties={"data": {}}, required=["data"])
        assert InputSchema.coerce(schema) is schema

    def test_coerce_invalid(self):
        """Test other types are a configuration error naming the type."""
        with pytest.raises(InvalidSchemaGenerator, match="got str"):
            InputSchema.coerce("invalid")
        with pytest.raises(ConfigurationError):
            InputSchema.coerce(None)

    def test_coerce_string_required(self):
        """Test a bare string for required is rejected, not split into characters."""
        with pytest.raises(InvalidSchemaGenerator, match="required must be a list of names, got str"):
            InputSchema.coerce({"properties": {"action": {}}, "required": "action"})

    def test_coerce_non_sequence_required(self):
        """Test required must be a list, tuple or set."""
        with pytest.raises(InvalidSchemaGenerator, match="got dict"):
            InputSchema.coerce({"properties": {"action": {}}, "required": {"action": True}})
        assert InputSchema.coerce({"required": ("a", "b")}).required == ["a", "b"]

    def test_coerce_non_mapping_properties(self):
        """Test properties must be a mapping."""
        with pytest.raises(InvalidSchemaGenerator, match="properties must be a mapping, got list"):
            InputSchema.coerce({"properties": ["a"]})


class TestPythonTypeToJsonSchema:
    """Test python_type_to_json_schema function."""

    def test_basic_types(self):
        """Test conversion of basic Python types."""
        assert python_type_to_json_schema(str) == {"type": "string"}
        assert python_type_to_json_schema(int) == {"type": "integer"}
        assert python_type_to_json_schema(float) == {"type": "number"}
        assert python_type_to_json_schema(bool) == {"type": "boolean"}
        assert python_type_to_json_schema(list) == {"type": "array"}
        assert python_type_to_json_schema(dict) == {"type": "object"}

    def test_optional_types(self):
        """Test Optional type handling."""
        assert python_type_to_json_schema(Optional[str]) == {"type": ["string", "null"]}
        assert python_type_to_json_schema(Optional[List[int]]) == {
            "type": ["array", "null"],
            "items": {"type": "integer"},
        }

    def test_container_types(self):
        """Test List and Dict handling."""
        assert python_type_to_json_schema(List[str]) == {"type": "array", "items": {"type": "string"}}
        assert python_type_to_json_schema(Dict[str, int]) == {
            "type": "object",
            "additionalProperties": {"type": "integer"},
        }

    def test_union_and_any(self):
        """Test Union and Any handling."""
        assert python_type_to_json_schema(Union[str, int]) == {
            "oneOf": [{"type": "string"}, {"type": "integer"}]
        }
        assert python_type_to_json_schema(Any) == {}


class TestGenerateFunctionInputSchema:
    """Test generate_function_input_schema function."""

    def test_simple_function(self):
        """Test parameters without defaults are required."""
        def greet(name: str, greeting: str = "Hello") -> str:
            return f"{greeting}, {name}"

        schema = generate_function_input_schema(greet)
        assert schema.to_dict() == {
            "type": "object",
            "properties": {"name": {"type": "string"}, "greeting": {"type": "string"}},
            "required": ["name"],
        }

    def test_context_parameter_is_skipped(self):
        """Test the context parameter never appears in the schema."""
        def manage(action: str, context=None, **extra):
            return action

        schema = generate_function_input_schema(manage)
        assert list(schema.properties) == ["action"]
        assert schema.required == ["action"]

    def test_no_parameters(self):
        """Test function with no parameters."""
        def no_params() -> str:
            return "hello"

        assert generate_function_input_schema(no_params) == InputSchema()
