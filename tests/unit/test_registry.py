"""
Unit tests for the collector registry (colspec.collectors.registry).
"""

import pytest

from colspec.collectors.base import Collector
from colspec.collectors.registry import CollectorRegistry, default_registry
from colspec.collectors.scalars import parse_text
from colspec.exceptions import ConfigurationError


class TestDefaultRegistry:
    """Tests for the built-in collector set."""

    @pytest.mark.parametrize(
        "code,tag",
        [
            ("l", "logical"), ("i", "integer"), ("d", "double"), ("n", "number"),
            ("c", "text"), ("f", "factor"), ("D", "date"), ("T", "datetime"),
            ("t", "time"), ("L", "list"), ("C", "cell-detail"), ("_", "skip"),
            ("-", "skip"), ("?", "guess"),
        ],
    )
    def test_shorthand_codes(self, code, tag):
        assert default_registry().tag_for_code(code) == tag

    def test_codes_unique(self):
        reg = default_registry()
        all_codes = [code for collector in reg for code in collector.codes]
        assert len(all_codes) == len(set(all_codes))

    def test_guess_order(self):
        tags = [c.tag for c in default_registry().guessable()]
        assert tags == ["logical", "integer", "double", "date", "datetime", "time", "text"]

    def test_structural_flags(self):
        reg = default_registry()
        assert not reg.get("skip").emits_output
        assert reg.get("cell-detail").passthrough
        assert reg.get("list").per_cell_guess

    def test_lookup_by_tag_or_code(self):
        reg = default_registry()
        assert reg.lookup("integer").tag == "integer"
        assert reg.lookup("i").tag == "integer"

    def test_unknown_code(self):
        with pytest.raises(ConfigurationError, match="Unknown shorthand code 'x'"):
            default_registry().tag_for_code("x")

    def test_unknown_tag(self):
        with pytest.raises(ConfigurationError, match="Unknown collector tag"):
            default_registry().get("money")
        with pytest.raises(ConfigurationError, match="not a registered tag"):
            default_registry().lookup("money")


class TestRegister:
    """Tests for adding collectors."""

    def test_register_new_type(self):
        reg = default_registry()
        reg.register(Collector(tag="upper", parse=lambda v, p, o: str(v).upper(), shorthand="u"))
        assert "upper" in reg
        assert reg.tag_for_code("u") == "upper"

    def test_duplicate_tag_rejected(self):
        reg = default_registry()
        with pytest.raises(ConfigurationError, match="already registered"):
            reg.register(Collector(tag="text", parse=parse_text))

    def test_replace_swaps_codes(self):
        reg = default_registry()
        reg.register(Collector(tag="text", parse=parse_text, shorthand="s"), replace=True)
        assert reg.tag_for_code("s") == "text"
        with pytest.raises(ConfigurationError):
            reg.tag_for_code("c")

    def test_code_collision_rejected(self):
        reg = default_registry()
        with pytest.raises(ConfigurationError, match="already used by collector 'integer'"):
            reg.register(Collector(tag="int32", parse=parse_text, shorthand="i"))
        assert "int32" not in reg

    def test_code_must_be_single_character(self):
        with pytest.raises(ConfigurationError, match="single character"):
            CollectorRegistry([Collector(tag="x", shorthand="xy")])

    def test_copy_is_independent(self):
        reg = default_registry()
        clone = reg.copy()
        clone.register(Collector(tag="upper", shorthand="u"))
        assert "upper" not in reg
        assert len(clone) == len(reg) + 1
