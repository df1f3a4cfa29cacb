"""Tests for tool compilation and namespace rebuilds."""

import pytest

from swarm_agent.tools.base import CompileError, ToolRecord
from swarm_agent.tools.compiler import compile_tool, rebuild, validate_tool_name


def record(name: str, source: str) -> ToolRecord:
    return ToolRecord(name=name, source=source)


class TestValidateToolName:
    """Tests for tool name rules."""

    @pytest.mark.parametrize("name", ["square", "tool_a", "Tool2"])
    def test_valid(self, name):
        """Test names that are accepted."""
        validate_tool_name(name)

    @pytest.mark.parametrize("name", ["", "2fast", "with-dash", "../up", "class", "match", "_private"])
    def test_invalid(self, name):
        """Test names that are rejected."""
        with pytest.raises(CompileError):
            validate_tool_name(name)

    def test_reserved(self):
        """Test that capability names are reserved."""
        with pytest.raises(CompileError) as exc_info:
            validate_tool_name("read_file", reserved={"read_file"})

        assert "reserved" in exc_info.value.message


class TestCompileTool:
    """Tests for compile_tool."""

    def test_compiles_function(self):
        """Test compiling a well-formed tool."""
        unit = compile_tool("square", "def square(x):\n    return str(int(x) ** 2)\n")
        assert unit.name == "square"

    def test_docstring_and_imports_allowed(self):
        """Test that a module docstring and imports may precede the function."""
        source = '"""Squares."""\nimport math\n\ndef root(x):\n    return str(math.sqrt(float(x)))\n'
        assert compile_tool("root", source).name == "root"

    def test_syntax_error_has_location(self):
        """Test that syntax errors report line and column."""
        with pytest.raises(CompileError) as exc_info:
            compile_tool("broken", "def broken(:\n    pass\n")

        assert exc_info.value.location.startswith("line 1")
        assert exc_info.value.tool_name == "broken"

    def test_wrong_function_name(self):
        """Test that the function must be named after the tool."""
        with pytest.raises(CompileError) as exc_info:
            compile_tool("square", "def cube(x):\n    return x\n")

        assert "cube" in exc_info.value.message

    def test_missing_function(self):
        """Test source without any function."""
        with pytest.raises(CompileError):
            compile_tool("square", '"""Only a docstring."""\n')

    def test_two_functions_rejected(self):
        """Test that helper functions are not allowed."""
        source = "def helper():\n    return 1\n\ndef square(x):\n    return x\n"
        with pytest.raises(CompileError):
            compile_tool("square", source)

    def test_top_level_statement_rejected(self):
        """Test that code outside the function is rejected."""
        source = "print('side effect')\n\ndef square(x):\n    return x\n"
        with pytest.raises(CompileError) as exc_info:
            compile_tool("square", source)

        assert exc_info.value.location == "line 1"

    def test_async_rejected(self):
        """Test that async tool functions are rejected."""
        with pytest.raises(CompileError):
            compile_tool("square", "async def square(x):\n    return x\n")

    def test_decorator_rejected(self):
        """Test that decorators, which run when the tool is loaded, are rejected."""
        source = "@staticmethod\ndef square(x):\n    return x\n"
        with pytest.raises(CompileError) as exc_info:
            compile_tool("square", source)

        assert exc_info.value.location == "line 1"

    @pytest.mark.parametrize(
        "signature",
        [
            "x=write_file('a.txt', 'b')",
            "x=remove_tool('victim')",
            "*, x=[print('loaded')]",
            "x=len",
        ],
    )
    def test_non_literal_default_rejected(self, signature):
        """Test that defaults are limited to literals."""
        with pytest.raises(CompileError):
            compile_tool("square", f"def square({signature}):\n    return x\n")

    @pytest.mark.parametrize(
        "signature",
        ["x: read_file('a.txt')", "x: list[str]", "x) -> print('loaded'"],
    )
    def test_evaluated_annotation_rejected(self, signature):
        """Test that annotations are limited to names and strings."""
        with pytest.raises(CompileError):
            compile_tool("square", f"def square({signature}):\n    return x\n")

    def test_literal_defaults_and_plain_annotations_allowed(self):
        """Test the definition-time expressions that stay allowed."""
        source = "def square(x: str = 'a', n: int = -1, *, flag: 'bool' = None) -> str:\n    return x\n"
        assert compile_tool("square", source).name == "square"

    def test_unencodable_source_rejected(self):
        """Test that text with a lone surrogate is a compile error."""
        with pytest.raises(CompileError) as exc_info:
            compile_tool("square", "def square(x):\n    return '\udc80'\n")

        assert exc_info.value.tool_name == "square"


class TestRebuild:
    """Tests for namespace rebuilds."""

    def test_empty(self):
        """Test rebuilding with no tools."""
        namespace = rebuild([], {})
        assert len(namespace) == 0
        assert namespace.tool_names == []

    def test_tools_resolve_each_other(self):
        """Test that a tool can call another tool by name."""
        namespace = rebuild(
            [
                record("tool_b", 'def tool_b(x):\n    return tool_a(x) + "_B"\n'),
                record("tool_a", 'def tool_a(x):\n    return x + "_A"\n'),
            ],
            {},
        )

        assert namespace.tool_names == ["tool_a", "tool_b"]
        assert namespace.get("tool_b")("test") == "test_A_B"

    def test_capabilities_bound(self):
        """Test that capability callables are visible to tools."""
        namespace = rebuild(
            [record("shout", "def shout(x):\n    return echo(x).upper()\n")],
            {"echo": lambda text: text},
        )

        assert namespace.get("shout")("hi") == "HI"

    def test_generation_recorded(self):
        """Test that the generation number is carried."""
        assert rebuild([], {}, generation=7).generation == 7

    def test_one_bad_tool_fails_whole_rebuild(self):
        """Test that a single broken tool fails the rebuild."""
        with pytest.raises(CompileError) as exc_info:
            rebuild(
                [
                    record("good", "def good():\n    return 'ok'\n"),
                    record("bad", "def bad(:\n"),
                ],
                {},
            )

        assert exc_info.value.tool_name == "bad"

    def test_failing_import_is_compile_error(self):
        """Test that an import that fails at load time is a compile error."""
        source = "import module_that_does_not_exist\n\ndef uses():\n    return 'x'\n"
        with pytest.raises(CompileError):
            rebuild([record("uses", source)], {})

    def test_shadowing_capability_rejected(self):
        """Test that a tool cannot replace a capability binding."""
        with pytest.raises(CompileError):
            rebuild([record("echo", "def echo(x):\n    return x\n")], {"echo": lambda x: x})

    def test_functions_mapping_is_read_only(self):
        """Test that a published snapshot cannot be mutated."""
        namespace = rebuild([record("a", "def a():\n    return 'a'\n")], {})

        with pytest.raises(TypeError):
            namespace.functions["b"] = lambda: "b"
