"""Tools dispatched by chain ``tool`` nodes.

Tools are pluggable and keyed by name. A tool receives the text of the
node's input and the node's ``config`` and returns a NodeOutput.
"""

import threading
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

from jinja2 import Environment, StrictUndefined

from modelweave.chains.models import NodeOutput
from modelweave.errors import ToolAlreadyRegisteredError, UnknownToolError

SearchBackend = Callable[[str, int], Awaitable[list[str]]]

_jinja = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)


@runtime_checkable
class ChainTool(Protocol):
    """Protocol implemented by chain tools."""

    name: str

    async def run(self, input_text: str, config: dict[str, Any]) -> NodeOutput:
        """Run the tool.

        Args:
            input_text: Text of the node's input
            config: Tool configuration from the node

        Returns:
            Tool output; ``text`` is always set
        """
        ...


class ChainToolRegistry:
    """Thread-safe registry of chain tools.

    Example:
        >>> registry = ChainToolRegistry()
        >>> registry.register(TemplateTool())
        >>> registry.get("template").name
        'template'
    """

    def __init__(self) -> None:
        self._tools: dict[str, ChainTool] = {}
        self._lock = threading.Lock()

    def register(self, tool: ChainTool, replace: bool = False) -> None:
        """Register a tool.

        Args:
            tool: Tool instance
            replace: Replace an existing tool with the same name

        Raises:
            ToolAlreadyRegisteredError: If the name is taken and replace=False
        """
        with self._lock:
            if tool.name in self._tools and not replace:
                raise ToolAlreadyRegisteredError(tool.name)
            self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        """Remove a tool.

        Raises:
            UnknownToolError: If no tool has that name
        """
        with self._lock:
            if name not in self._tools:
                raise UnknownToolError(name)
            del self._tools[name]

    def get(self, name: str) -> ChainTool:
        """Get a tool by name.

        Raises:
            UnknownToolError: If no tool has that name
        """
        with self._lock:
            if name not in self._tools:
                raise UnknownToolError(name)
            return self._tools[name]

    def has_tool(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def list_tools(self) -> list[str]:
        with self._lock:
            return sorted(self._tools)

    def clear(self) -> None:
        with self._lock:
            self._tools.clear()


class TemplateTool:
    """Renders a Jinja2 template with the input text.

    Config:
        template: Template source (default ``{{ input }}``)
        variables: Extra template variables
    """

    name = "template"

    async def run(self, input_text: str, config: dict[str, Any]) -> NodeOutput:
        template = _jinja.from_string(config.get("template", "{{ input }}"))
        variables = dict(config.get("variables") or {})
        return NodeOutput(text=template.render({**variables, "input": input_text}))


_CODE_TEMPLATES = {
    "python": (
        '# Generated from: {{ input }}\n\n'
        'def example():\n'
        '    print("Hello from generated code!")\n'
        '    return "Success"\n\n\n'
        'example()\n'
    ),
    "javascript": (
        '// Generated from: {{ input }}\n\n'
        'function example() {\n'
        '  console.log("Hello from generated code!");\n'
        '  return "Success";\n'
        '}\n\n'
        'example();\n'
    ),
}


class CodeGeneratorTool:
    """Emits a code scaffold derived from the input.

    The scaffold is returned both in ``text`` (with a heading) and in
    ``generated_code`` so that output nodes can surface it.

    Config:
        language: ``python`` (default) or ``javascript``
    """

    name = "code_generator"

    async def run(self, input_text: str, config: dict[str, Any]) -> NodeOutput:
        language = str(config.get("language", "python")).lower()
        if language not in _CODE_TEMPLATES:
            raise ValueError(f"unsupported language '{language}'")
        code = _jinja.from_string(_CODE_TEMPLATES[language]).render(
            input=" ".join(input_text.split())
        )
        return NodeOutput(
            text=f"Generated code:\n\n{code}",
            generated_code=code,
            metadata={"language": language},
        )


class SearchTool:
    """Runs the input as a query against an injected search backend.

    Config:
        max_results: Number of results to request (default 3)
    """

    name = "search"

    def __init__(self, backend: SearchBackend):
        """Initialize with a backend.

        Args:
            backend: ``async (query, max_results) -> list[str]``
        """
        self._backend = backend

    async def run(self, input_text: str, config: dict[str, Any]) -> NodeOutput:
        max_results = int(config.get("max_results", 3))
        results = await self._backend(input_text, max_results)
        lines = [f"Search results for: {input_text}"] + [f"- {result}" for result in results]
        return NodeOutput(text="\n".join(lines), metadata={"results": list(results)})


def default_tool_registry(search_backend: Optional[SearchBackend] = None) -> ChainToolRegistry:
    """Create a registry with the built-in tools.

    ``search`` is only registered when a backend is supplied.
    """
    registry = ChainToolRegistry()
    registry.register(TemplateTool())
    registry.register(CodeGeneratorTool())
    if search_backend is not None:
        registry.register(SearchTool(search_backend))
    return registry
