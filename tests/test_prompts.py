"""Tests for prompt definitions."""

import pytest

from ctxmcp.errors import ConfigurationError, InvalidArguments, InvocationFailure
from ctxmcp.prompts import Prompt, PromptArgument, PromptMessage, PromptResult, prompt

PREMIUM = {"user": {"premium": True}}
BASIC = {"user": {"premium": False}}


def premium_description(context):
    if ((context or {}).get("user") or {}).get("premium"):
        return "Premium prompt with advanced features and customization"
    return "Basic prompt with standard functionality"


def render(context=None, **arguments):
    premium = ((context or {}).get("user") or {}).get("premium")
    return PromptMessage(role="user", content=f"{'Premium' if premium else 'Basic'} prompt: {arguments}")


class TestPrompt:
    """Test Prompt class."""

    def test_static_description(self):
        """Test literal descriptions ignore the context."""
        static = Prompt(render, name="static_prompt", description="A prompt with static description", arguments=[])
        assert static.name == "static_prompt"
        assert static.description == "A prompt with static description"
        assert static.resolve_description(PREMIUM) == static.description

    def test_dynamic_description(self):
        """Test resolver descriptions follow the context."""
        dynamic = Prompt(render, name="dynamic_description_prompt", description=premium_description)
        assert dynamic.resolve_description(BASIC) == "Basic prompt with standard functionality"
        assert dynamic.resolve_description(PREMIUM) == "Premium prompt with advanced features and customization"
        assert dynamic.description == "Basic prompt with standard functionality"
        assert dynamic.to_dict(PREMIUM)["description"].startswith("Premium")

    def test_to_dict(self):
        """Test the prompt descriptor."""
        described = Prompt(
            render,
            name="review",
            title="Code review",
            arguments=[PromptArgument(name="code", description="Code to review", required=True)],
        )
        assert described.to_dict() == {
            "name": "review",
            "title": "Code review",
            "arguments": [{"name": "code", "required": True, "description": "Code to review"}],
        }

    def test_arguments_from_mappings(self):
        """Test argument mappings are coerced."""
        described = Prompt(render, name="p", arguments=[{"name": "topic", "required": True}])
        assert described.arguments == [PromptArgument(name="topic", required=True)]

    def test_invalid_arguments_declaration(self):
        """Test malformed argument declarations are configuration errors."""
        with pytest.raises(ConfigurationError):
            Prompt(render, name="p", arguments="topic").arguments
        with pytest.raises(ConfigurationError):
            Prompt(render, name="p", arguments=[42]).arguments

    def test_arguments_resolver(self):
        """Test arguments can depend on the context."""
        def arguments(context):
            base = [PromptArgument(name="topic", required=True)]
            if ((context or {}).get("user") or {}).get("premium"):
                base.append(PromptArgument(name="style", required=True))
            return base

        dynamic = Prompt(render, name="p", arguments=arguments)
        assert dynamic.resolve_input_schema(PREMIUM).required == ["topic", "style"]
        assert dynamic.resolve_input_schema(BASIC).required == ["topic"]


class TestPromptGet:
    """Test rendering prompts."""

    def test_get_with_message(self):
        """Test a single message result."""
        dynamic = Prompt(render, name="p", description=premium_description)
        result = dynamic.get({}, PREMIUM)
        assert isinstance(result, PromptResult)
        assert result.messages[0].content == "Premium prompt: {}"
        assert result.to_dict() == {
            "messages": [{"role": "user", "content": {"type": "text", "text": "Premium prompt: {}"}}],
            "description": "Premium prompt with advanced features and customization",
        }

    def test_get_with_dict_messages(self):
        """Test message dicts are converted."""
        @prompt
        def greeting(name: str = "World") -> list:
            """Greet."""
            return [{"role": "user", "content": f"Hello, {name}!"}]

        result = greeting.get({"name": "Alice"})
        assert result.messages == [PromptMessage(role="user", content="Hello, Alice!")]
        assert result.description == "Greet."

    def test_missing_required_argument(self):
        """Test required prompt arguments are validated before rendering."""
        calls = []

        def tutor(topic, context=None):
            calls.append(topic)
            return f"Teach {topic}"

        tutor_prompt = Prompt.from_function(tutor)
        assert tutor_prompt.arguments == [PromptArgument(name="topic", required=True)]
        with pytest.raises(InvalidArguments) as excinfo:
            tutor_prompt.get({})
        assert excinfo.value.missing == ["topic"]
        assert calls == []

    def test_invalid_message_format(self):
        """Test unusable template results are invocation failures."""
        def broken():
            return [{"text": "no role"}]

        with pytest.raises(InvocationFailure):
            Prompt(broken).get({})

    def test_template_error(self):
        """Test errors raised by the template are invocation failures."""
        def failing():
            raise RuntimeError("boom")

        with pytest.raises(InvocationFailure, match="prompt failing"):
            Prompt(failing).get({})

    def test_define(self):
        """Test inline prompt definitions."""
        hash_prompt = Prompt.define(
            lambda **args: PromptMessage(role="user", content=str(args)),
            name="hash_prompt",
            description="A prompt defined with hash syntax",
        )
        assert hash_prompt.description == "A prompt defined with hash syntax"

    def test_extend_resets_fields(self):
        """Test extended prompts do not inherit the parent's resolver."""
        parent = Prompt(render, name="parent", description=lambda context: "Parent prompt description")
        child = parent.extend(description=lambda context: "Child prompt description")
        bare = parent.extend()

        assert parent.resolve_description({}) == "Parent prompt description"
        assert child.resolve_description({}) == "Child prompt description"
        assert bare.description is None
