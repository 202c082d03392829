"""
Unit tests for spec resolution (colspec.resolver).

Tests every accepted input form, the explicit > shorthand > default
priority, structural errors, lenient mode and tie-breaking.
"""

import pytest

from colspec.config import ReadOptions
from colspec.exceptions import ConfigurationError, ShapeMismatch, UnresolvedColumnError
from colspec.grid import RawGrid
from colspec.resolver import SpecResolver, resolve_spec
from colspec.spec import ColTypes, CollectorSpec, col_date, col_integer, cols


# ---------------------------------------------------------------------------
# Input forms
# ---------------------------------------------------------------------------

class TestInputForms:
    """Tests for the accepted user specification shapes."""

    def test_none_guesses_everything(self, people_grid):
        res = resolve_spec(people_grid)
        assert res.spec.tags == ["text", "integer", "logical"]
        assert res.defaulted == [0, 1, 2]
        assert res.guessed == [0, 1, 2]

    def test_shorthand(self, people_grid):
        res = resolve_spec(people_grid, "?i_")
        assert res.spec.tags == ["text", "integer", "skip"]
        assert res.guessed == [0]
        assert res.defaulted == []

    def test_shorthand_alias(self, people_grid):
        assert resolve_spec(people_grid, "c-l").spec.tags == ["text", "skip", "logical"]

    def test_mapping_by_name(self, people_grid):
        res = resolve_spec(people_grid, {"Age": "integer", "Has kids": "l"})
        assert res.spec.tags == ["text", "integer", "logical"]
        assert res.defaulted == [0]

    def test_mapping_by_position(self, people_grid):
        res = resolve_spec(people_grid, {1: "d"})
        assert res.spec.column(1).tag == "double"

    def test_coltypes_default_applies(self, people_grid):
        res = resolve_spec(people_grid, cols(Name="c", default="_"))
        assert res.spec.tags == ["text", "skip", "skip"]
        assert res.spec.default == CollectorSpec(tag="skip")

    def test_list_one_rule_per_column(self, people_grid):
        res = resolve_spec(people_grid, ["c", col_integer(), "skip"])
        assert res.spec.tags == ["text", "integer", "skip"]

    def test_options_default(self, people_grid):
        res = SpecResolver(ReadOptions(default=CollectorSpec(tag="text"))).resolve(people_grid)
        assert res.spec.tags == ["text", "text", "text"]
        assert res.guessed == []

    def test_unsupported_type(self, people_grid):
        with pytest.raises(ConfigurationError, match="Unsupported"):
            resolve_spec(people_grid, 42)

    def test_identity_carries_names(self, people_grid):
        res = resolve_spec(people_grid)
        assert res.spec.labels == ["Name", "Age", "Has kids"]

    def test_headerless_labels(self, headerless_grid):
        res = resolve_spec(headerless_grid)
        assert res.spec.labels == ["X1", "X2", "X3"]
        assert res.spec.tags == ["text", "integer", "double"]


# ---------------------------------------------------------------------------
# Priority and completion
# ---------------------------------------------------------------------------

class TestResolutionOrder:
    """Tests for rule priority and parameter completion."""

    def test_codes_canonicalised_to_tags(self, people_grid):
        res = resolve_spec(people_grid, {"Age": "i"})
        assert res.spec.column(1).collector == CollectorSpec(tag="integer")

    def test_default_params_dropped(self, people_grid):
        res = resolve_spec(
            people_grid, {"Name": CollectorSpec(tag="factor", params={"ordered": False})}
        )
        assert res.spec.column(0).collector.params == {}

    def test_explicit_date_gets_sniffed_format(self):
        grid = RawGrid(rows=[["31.12.2020"], ["01.01.2021"]], header=["when"])
        res = resolve_spec(grid, {"when": col_date()})
        assert res.spec.column(0).collector == col_date("%d.%m.%Y")

    def test_explicit_format_kept(self):
        grid = RawGrid(rows=[["2020-01-01"]], header=["when"])
        res = resolve_spec(grid, {"when": col_date("%Y-%d-%m")})
        assert res.spec.column(0).collector.params == {"format": "%Y-%d-%m"}

    def test_deterministic(self, people_grid):
        a = resolve_spec(people_grid, "??l").spec
        b = resolve_spec(people_grid, "??l").spec
        assert a == b

    def test_no_guess_left(self, people_grid):
        spec = resolve_spec(people_grid, "???").spec
        assert not any(c.collector.is_guess for c in spec.columns)


# ---------------------------------------------------------------------------
# Structural errors
# ---------------------------------------------------------------------------

class TestStructuralErrors:
    """Tests for errors raised before any parsing."""

    def test_shorthand_too_short(self, people_grid):
        with pytest.raises(ShapeMismatch) as exc_info:
            resolve_spec(people_grid, "?i")
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2

    def test_shorthand_length_checked_before_codes(self, people_grid):
        with pytest.raises(ShapeMismatch):
            resolve_spec(people_grid, "xyzw")

    def test_unknown_shorthand_code(self, people_grid):
        with pytest.raises(ConfigurationError, match="'x'"):
            resolve_spec(people_grid, "?x_")

    def test_list_wrong_length(self, people_grid):
        with pytest.raises(ShapeMismatch, match="specification list"):
            resolve_spec(people_grid, ["c"])

    def test_unknown_tag(self, people_grid):
        with pytest.raises(ConfigurationError, match="money"):
            resolve_spec(people_grid, {"Age": "money"})

    def test_unknown_param(self, people_grid):
        with pytest.raises(ConfigurationError, match="integer"):
            resolve_spec(people_grid, {"Age": CollectorSpec(tag="integer", params={"base": 16})})

    def test_unknown_name(self, people_grid):
        with pytest.raises(UnresolvedColumnError, match="Weight") as exc_info:
            resolve_spec(people_grid, {"Weight": "d"})
        assert exc_info.value.matches == []

    def test_position_out_of_range(self, people_grid):
        with pytest.raises(UnresolvedColumnError, match="out of range"):
            resolve_spec(people_grid, {3: "d"})

    def test_name_without_header(self, headerless_grid):
        with pytest.raises(UnresolvedColumnError, match="no header"):
            resolve_spec(headerless_grid, {"a": "c"})

    def test_two_references_same_column(self, people_grid):
        with pytest.raises(ConfigurationError, match="position 1"):
            resolve_spec(people_grid, {"Age": "i", 1: "d"})


# ---------------------------------------------------------------------------
# Duplicate headers, lenient mode
# ---------------------------------------------------------------------------

class TestDuplicatesAndLenient:
    """Tests for ambiguous names and non-strict resolution."""

    @pytest.fixture
    def dup_grid(self) -> RawGrid:
        return RawGrid(rows=[["1", "2"]], header=["v", "v"])

    def test_ambiguous_name_raises(self, dup_grid):
        with pytest.raises(UnresolvedColumnError, match="ambiguous") as exc_info:
            resolve_spec(dup_grid, {"v": "i"})
        assert exc_info.value.matches == [0, 1]

    def test_tie_break_first(self, dup_grid):
        res = resolve_spec(dup_grid, {"v": "c"}, ReadOptions(tie_break="first"))
        assert res.spec.tags == ["text", "integer"]
        assert 0 not in res.defaulted

    def test_position_disambiguates(self, dup_grid):
        res = resolve_spec(dup_grid, {1: "_"})
        assert res.spec.tags == ["integer", "skip"]

    def test_lenient_records_warning(self, people_grid):
        res = resolve_spec(people_grid, {"Weight": "d", "Age": "i"}, ReadOptions(strict=False))
        assert res.spec.tags == ["text", "integer", "logical"]
        assert len(res.warnings) == 1
        assert res.warnings[0].reference == "Weight"
        assert "matches no header" in res.warnings[0].reason

    def test_coltypes_model_accepted_directly(self, people_grid):
        ct = ColTypes(cols={"Age": CollectorSpec(tag="integer")})
        assert resolve_spec(people_grid, ct).spec.column(1).tag == "integer"
