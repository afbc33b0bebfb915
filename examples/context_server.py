"""Example server demonstrating context-dependent tool schemas.

To see different user roles:
- Regular user: python examples/context_server.py
- Admin user: USER_ROLE=admin python examples/context_server.py

The admin tool advertises a different input schema, and behaves
differently, depending on the role in the server context.
"""

import json
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

from ctxmcp import (
    Prompt,
    PromptArgument,
    PromptMessage,
    PromptResult,
    Resource,
    Server,
    Tool,
    ToolResponse,
    connect_in_process,
    tool,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("context_server")


class ExampleSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    user_role: str = "user"


@tool(
    description="A simple example tool that adds two numbers",
    input_schema={
        "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
        "required": ["a", "b"],
    },
)
def example_tool(a, b):
    return ToolResponse.text(f"The sum of {a} and {b} is {a + b}")


def _role(context):
    return ((context or {}).get("user") or {}).get("role")


def admin_schema(context):
    """Admins get the full action set; everyone else gets read-only actions."""
    if _role(context) == "admin":
        return {
            "properties": {
                "action": {"type": "string", "enum": ["deploy", "restart", "configure", "monitor"]},
                "target": {"type": "string", "description": "Target environment (production, staging, etc.)"},
                "force": {"type": "boolean", "description": "Force the action without confirmation"},
            },
            "required": ["action", "target"],
        }
    return {
        "properties": {
            "action": {"type": "string", "enum": ["status", "logs", "metrics"]},
        },
        "required": ["action"],
    }


def admin_description(context):
    if _role(context) == "admin":
        return "Administrative tool with full deployment and configuration access"
    return "Read-only administrative tool for status and monitoring"


def admin_action(action, target=None, force=False, context=None):
    if _role(context) == "admin":
        return ToolResponse.text(f"Admin action '{action}' executed on '{target}' (force: {force})")
    return ToolResponse.text(f"User action '{action}' executed (read-only access)")


admin_tool = Tool(
    admin_action,
    name="admin_tool",
    description=admin_description,
    input_schema=admin_schema,
)

echo_tool = Tool.define(
    lambda message: ToolResponse.text(f"Hello from echo tool! Message: {message}"),
    name="echo",
    description="A simple example tool that echoes back its arguments",
    input_schema={"properties": {"message": {"type": "string"}}, "required": ["message"]},
)

example_prompt = Prompt(
    lambda message: PromptResult(
        messages=[PromptMessage(role="user", content=message)],
        description="A simple example prompt that echoes back its arguments",
    ),
    name="example_prompt",
    description="A simple example prompt that echoes back its arguments",
    arguments=[PromptArgument(name="message", description="The message to echo back", required=True)],
)

test_resource = Resource(
    "https://test_resource.invalid",
    name="test-resource",
    title="Test Resource",
    description="Test resource that echoes back the uri as its content",
    mime_type="text/plain",
)


def read_resource(params):
    return [{
        "uri": params["uri"],
        "mimeType": "text/plain",
        "text": f"Hello, world! URI: {params['uri']}",
    }]


def build_server(role):
    return Server(
        name="example_server",
        version="1.0.0",
        tools=[example_tool, admin_tool, echo_tool],
        prompts=[example_prompt],
        resources=[test_resource],
        resources_read_handler=read_resource,
        context={"user": {"id": "user123", "role": role}},
    )


def main():
    role = ExampleSettings().user_role
    logger.info(f"Starting example server with role {role}")

    server = build_server(role)
    _, client = connect_in_process(server)
    requests = [
        ("initialize", {"protocolVersion": server.configuration.protocol_version}),
        ("tools/list", None),
        ("tools/call", {"name": "example_tool", "arguments": {"a": 2, "b": 3}}),
        ("tools/call", {"name": "admin_tool", "arguments": {"action": "deploy", "target": "staging"}}),
        ("tools/call", {"name": "admin_tool", "arguments": {"action": "status"}}),
        ("prompts/get", {"name": "example_prompt", "arguments": {"message": "hello"}}),
        ("resources/read", {"uri": "https://test_resource.invalid"}),
    ]
    client.notify("notifications/initialized")
    for method, params in requests:
        print(f"--> {method}")
        print(json.dumps(client.request(method, params), indent=2))


if __name__ == "__main__":
    main()
