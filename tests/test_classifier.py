"""Tests for the safety classifier."""

import pytest

from swarm_agent.tools.base import RiskLevel
from swarm_agent.tools.classifier import classify, explain


class TestClassify:
    """Tests for classify."""

    def test_pure_computation_is_safe(self):
        """Test that plain computation is SAFE."""
        assert classify("def square(x):\n    return str(int(x) ** 2)\n") == RiskLevel.SAFE

    @pytest.mark.parametrize(
        "call, level",
        [
            ("list_tools()", RiskLevel.LOW_RISK),
            ("inspect_tool(x)", RiskLevel.LOW_RISK),
            ("send_message('http://peer/message', x)", RiskLevel.LOW_RISK),
            ("read_file(x)", RiskLevel.MEDIUM_RISK),
            ("scrape_url(x)", RiskLevel.MEDIUM_RISK),
            ("write_file('out.txt', x)", RiskLevel.HIGH_RISK),
            ("clone_agent(x)", RiskLevel.HIGH_RISK),
            ("remove_tool(x)", RiskLevel.HIGH_RISK),
            ("start_server(x)", RiskLevel.HIGH_RISK),
        ],
    )
    def test_capability_levels(self, call, level):
        """Test the level assigned to each capability reference."""
        source = f"def t(x):\n    return {call}\n"
        assert classify(source) == level

    def test_maximum_wins(self):
        """Test that the most dangerous reference determines the level."""
        source = "def t(x):\n    data = read_file(x)\n    list_tools()\n    return data\n"
        assert classify(source) == RiskLevel.MEDIUM_RISK

    def test_write_file_anywhere_is_high(self):
        """Test that write_file makes any source HIGH_RISK, even unreached."""
        source = (
            "def t(x):\n"
            "    if False:\n"
            "        write_file('a', 'b')\n"
            "    return read_file(x)\n"
        )
        assert classify(source) == RiskLevel.HIGH_RISK

    def test_reference_without_call_counts(self):
        """Test that aliasing a capability is still a reference."""
        source = "def t(x):\n    w = write_file\n    return w(x, x)\n"
        assert classify(source) == RiskLevel.HIGH_RISK

    @pytest.mark.parametrize(
        "body",
        [
            "open(x).read()",
            "eval(x)",
            "__import__('os').getcwd()",
            "globals()['write' + '_file'](x, x)",
            "x.__class__",
        ],
    )
    def test_escape_hatches_are_high(self, body):
        """Test that builtins reaching past the capability set are HIGH_RISK."""
        assert classify(f"def t(x):\n    return {body}\n") == RiskLevel.HIGH_RISK

    def test_import_is_high(self):
        """Test that imports are HIGH_RISK."""
        source = "import os\n\ndef t(x):\n    return x\n"
        assert classify(source) == RiskLevel.HIGH_RISK

    def test_string_lookup_of_capability(self):
        """Test that capability names in strings are detected."""
        source = "def t(x):\n    return globals_table['scrape_url']\n"
        assert classify(source) == RiskLevel.MEDIUM_RISK

    def test_unparseable_is_high(self):
        """Test that source that does not parse is HIGH_RISK."""
        assert classify("def t(:\n") == RiskLevel.HIGH_RISK

    def test_levels_ordered(self):
        """Test the total order of risk levels."""
        assert RiskLevel.SAFE < RiskLevel.LOW_RISK < RiskLevel.MEDIUM_RISK < RiskLevel.HIGH_RISK
        assert RiskLevel.MEDIUM_RISK.label == "medium_risk"


class TestExplain:
    """Tests for explain."""

    def test_reports_references(self):
        """Test that explain lists what drove the level."""
        source = "def t(x):\n    return read_file(x) + list_tools()[0]\n"
        assert explain(source) == {
            "list_tools": RiskLevel.LOW_RISK,
            "read_file": RiskLevel.MEDIUM_RISK,
        }

    def test_safe_source_has_no_findings(self):
        """Test that safe source yields nothing."""
        assert explain("def t(x):\n    return x\n") == {}
