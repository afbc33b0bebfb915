"""Resource definitions for MCP servers."""

import asyncio
import inspect
import json
from typing import Any, Callable, Dict, List, Optional

from .capability import takes_context
from .errors import InvocationFailure
from .schema import CONTEXT_PARAMETER


def format_contents(uri: str, mime_type: Optional[str], data: Any) -> Dict[str, Any]:
    """Build one entry of a ``resources/read`` result from raw data."""
    if isinstance(data, str):
        text = data
    elif mime_type == "application/json" or isinstance(data, (dict, list)):
        text = json.dumps(data, indent=2)
    else:
        text = str(data)

    contents = {"uri": uri, "text": text}
    if mime_type:
        contents["mimeType"] = mime_type
    return contents


class Resource:
    """Represents an MCP resource.

    Resource metadata is static. The content comes from ``func`` when one is
    bound, otherwise from the server's ``resources_read_handler``.
    """

    kind = "resource"

    def __init__(
        self,
        uri: str,
        name: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        mime_type: Optional[str] = "text/plain",
        func: Optional[Callable] = None
    ):
        self.uri = uri
        self.name = name or (func.__name__ if func is not None else uri.rstrip("/").split("/")[-1])
        self.title = title
        self.description = description
        self.mime_type = mime_type
        self.func = func

    @classmethod
    def from_function(cls, func: Callable, uri: str, **options: Any) -> "Resource":
        if "description" not in options and func.__doc__:
            options["description"] = inspect.cleandoc(func.__doc__)
        return cls(uri, func=func, **options)

    @property
    def readable(self) -> bool:
        return self.func is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {"uri": self.uri, "name": self.name}
        if self.title:
            result["title"] = self.title
        if self.description:
            result["description"] = self.description
        if self.mime_type:
            result["mimeType"] = self.mime_type
        return result

    def read(self, context: Any = None) -> Dict[str, List[Dict[str, Any]]]:
        """Read the resource data through its bound function.

        Raises:
            InvocationFailure: The function raised
        """
        kwargs = {CONTEXT_PARAMETER: context} if takes_context(self.func) else {}
        try:
            if inspect.iscoroutinefunction(self.func):
                data = asyncio.run(self.func(**kwargs))
            else:
                data = self.func(**kwargs)
        except Exception as e:
            raise InvocationFailure(self.kind, self.uri, e) from e
        return {"contents": [format_contents(self.uri, self.mime_type, data)]}


def resource(uri: str, **options: Any) -> Callable[[Callable], Resource]:
    """Decorator turning a function into a Resource.

    Usage:
        @resource(uri="config://settings", mime_type="application/json")
        def settings() -> dict:
            return {"version": "1.0.0"}
    """
    def decorator(func: Callable) -> Resource:
        return Resource.from_function(func, uri, **options)
    return decorator
