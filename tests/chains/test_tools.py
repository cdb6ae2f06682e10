"""Tests for chain tools and the tool registry."""

import pytest
from jinja2 import UndefinedError

from modelweave.chains.models import NodeOutput
from modelweave.chains.tools import (
    ChainTool,
    ChainToolRegistry,
    CodeGeneratorTool,
    SearchTool,
    TemplateTool,
    default_tool_registry,
)
from modelweave.errors import ToolAlreadyRegisteredError, UnknownToolError


class EchoTool:
    name = "echo"

    async def run(self, input_text: str, config: dict) -> NodeOutput:
        return NodeOutput(text=input_text)


class TestChainToolRegistry:
    def test_register_and_get(self) -> None:
        registry = ChainToolRegistry()
        tool = EchoTool()

        registry.register(tool)

        assert registry.get("echo") is tool
        assert registry.has_tool("echo")
        assert isinstance(tool, ChainTool)

    def test_duplicate_registration_rejected(self) -> None:
        registry = ChainToolRegistry()
        registry.register(EchoTool())

        with pytest.raises(ToolAlreadyRegisteredError):
            registry.register(EchoTool())

    def test_replace(self) -> None:
        registry = ChainToolRegistry()
        registry.register(EchoTool())
        replacement = EchoTool()

        registry.register(replacement, replace=True)

        assert registry.get("echo") is replacement

    def test_unknown_tool(self) -> None:
        registry = ChainToolRegistry()

        with pytest.raises(UnknownToolError):
            registry.get("missing")
        with pytest.raises(UnknownToolError):
            registry.unregister("missing")

    def test_unregister_and_clear(self) -> None:
        registry = default_tool_registry()
        registry.register(EchoTool())

        registry.unregister("echo")
        assert registry.list_tools() == ["code_generator", "template"]

        registry.clear()
        assert registry.list_tools() == []


def test_default_registry_adds_search_with_backend() -> None:
    async def backend(query: str, limit: int) -> list[str]:
        return []

    assert "search" in default_tool_registry(backend).list_tools()
    assert "search" not in default_tool_registry().list_tools()


@pytest.mark.asyncio
async def test_template_tool_renders_input_and_variables() -> None:
    output = await TemplateTool().run(
        "world", {"template": "{{ greeting }}, {{ input }}!", "variables": {"greeting": "Hello"}}
    )

    assert output.text == "Hello, world!"


@pytest.mark.asyncio
async def test_template_tool_undefined_variable() -> None:
    with pytest.raises(UndefinedError):
        await TemplateTool().run("x", {"template": "{{ missing }}"})


@pytest.mark.asyncio
async def test_code_generator_languages() -> None:
    python = await CodeGeneratorTool().run("sort a   list", {})
    javascript = await CodeGeneratorTool().run("sort a list", {"language": "JavaScript"})

    assert python.generated_code.startswith("# Generated from: sort a list")
    assert "def example():" in python.generated_code
    assert python.text.startswith("Generated code:")
    assert "function example()" in javascript.generated_code
    assert javascript.metadata == {"language": "javascript"}


@pytest.mark.asyncio
async def test_code_generator_rejects_unknown_language() -> None:
    with pytest.raises(ValueError):
        await CodeGeneratorTool().run("x", {"language": "cobol"})


@pytest.mark.asyncio
async def test_search_tool_formats_results() -> None:
    queries = []

    async def backend(query: str, limit: int) -> list[str]:
        queries.append((query, limit))
        return ["first", "second"]

    output = await SearchTool(backend).run("llm routing", {"max_results": 2})

    assert queries == [("llm routing", 2)]
    assert output.text == "Search results for: llm routing\n- first\n- second"
    assert output.metadata["results"] == ["first", "second"]
