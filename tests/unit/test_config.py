"""
Unit tests for option models and YAML I/O (colspec.config).

Tests Pydantic validation of Locale/ReadOptions and the column spec
save/load round trip.
"""

import pytest
from pydantic import ValidationError

from colspec.config import Locale, ReadOptions, load_col_types, save_col_types
from colspec.exceptions import ConfigurationError
from colspec.spec import ColTypes, CollectorSpec, col_date, col_factor, col_integer, cols


# ---------------------------------------------------------------------------
# Locale / ReadOptions
# ---------------------------------------------------------------------------

class TestLocale:
    """Tests for Locale validation."""

    def test_defaults(self):
        loc = Locale()
        assert loc.decimal_mark == "."
        assert loc.grouping_mark == ","
        assert loc.date_formats[0] == "%Y-%m-%d"

    def test_marks_must_differ(self):
        with pytest.raises(ValidationError, match="must differ"):
            Locale(decimal_mark=",", grouping_mark=",")

    def test_mark_single_character(self):
        with pytest.raises(ValidationError):
            Locale(decimal_mark="..")

    def test_boolean_spellings_disjoint(self):
        with pytest.raises(ValidationError, match="both true_values and false_values"):
            Locale(true_values=["yes", "y"], false_values=["no", "y"])


class TestReadOptions:
    """Tests for ReadOptions defaults and validation."""

    def test_defaults(self):
        opts = ReadOptions()
        assert opts.default.is_guess
        assert opts.guess_max == 1000
        assert opts.strict is True
        assert opts.tie_break == "error"
        assert opts.na == ["", "NA"]

    def test_default_from_string(self):
        assert ReadOptions(default="c").default == CollectorSpec(tag="c")

    def test_guess_max_positive(self):
        with pytest.raises(ValidationError, match="guess_max"):
            ReadOptions(guess_max=0)

    def test_tie_break_choices(self):
        with pytest.raises(ValidationError, match="tie_break"):
            ReadOptions(tie_break="last")


# ---------------------------------------------------------------------------
# YAML I/O
# ---------------------------------------------------------------------------

class TestColTypesYaml:
    """Tests for save_col_types / load_col_types."""

    def test_round_trip(self, tmp_path):
        original = cols(
            {"Age": col_integer(), 2: col_date("%d/%m/%Y"), "Grade": col_factor(["a", "b"])},
            default="c",
        )
        path = tmp_path / "spec.yaml"
        save_col_types(original, path)
        assert load_col_types(path) == original

    def test_position_keys_stay_integers(self, tmp_path):
        path = tmp_path / "spec.yaml"
        save_col_types(cols({0: "_", "0": "i"}), path)
        loaded = load_col_types(path)
        assert loaded.cols[0] == CollectorSpec(tag="_")
        assert loaded.cols["0"] == CollectorSpec(tag="i")

    def test_bare_tags_written_compactly(self, tmp_path):
        path = tmp_path / "spec.yaml"
        save_col_types(cols(Age="integer"), path)
        text = path.read_text(encoding="utf-8")
        assert "Age: integer" in text
        assert text.startswith("# colspec column specification")

    def test_unicode_names(self, tmp_path):
        path = tmp_path / "spec.yaml"
        save_col_types(cols({"수정주가": "d"}), path)
        assert "수정주가" in path.read_text(encoding="utf-8")
        assert "수정주가" in load_col_types(path).cols

    def test_load_handwritten(self, tmp_path):
        path = tmp_path / "spec.yaml"
        path.write_text(
            "default: skip\n"
            "cols:\n"
            "  Name: c\n"
            "  when:\n"
            "    tag: date\n"
            "    params:\n"
            "      format: '%d.%m.%Y'\n",
            encoding="utf-8",
        )
        loaded = load_col_types(path)
        assert loaded.default == CollectorSpec(tag="skip")
        assert loaded.cols["when"] == col_date("%d.%m.%Y")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_col_types(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "spec.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="empty"):
            load_col_types(path)

    def test_invalid_content(self, tmp_path):
        path = tmp_path / "spec.yaml"
        path.write_text("cols: [1, 2]\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_col_types(path)

    def test_empty_coltypes(self, tmp_path):
        path = tmp_path / "spec.yaml"
        save_col_types(ColTypes(), path)
        assert load_col_types(path) == ColTypes()
