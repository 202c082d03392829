"""
Configuration models and YAML I/O for colspec.

This module defines the Pydantic models that control resolution and
parsing, plus helpers to persist a user-authored column specification.

Key models:
- Locale: number marks, boolean spellings, and the date/time patterns
  used both as defaults and as the candidate set for format sniffing.
- ReadOptions: default rule, guess sample size, strictness, tie-break
  policy, missing-value strings, whitespace trimming and the Locale.

Key functions:
- load_col_types(path) -> ColTypes: Load and validate a spec from YAML.
- save_col_types(col_types, path): Serialise a spec to YAML.

Locale values are plain parameters handed to the collectors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from colspec.exceptions import ConfigurationError
from colspec.spec import GUESS, ColTypes, CollectorSpec

logger = logging.getLogger(__name__)

# Candidate patterns tried, in order, when sniffing a date-like column.
# ISO layouts come first so an ambiguous sample resolves to ISO.
DEFAULT_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%B %d, %Y",
]

DEFAULT_DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
]

DEFAULT_TIME_FORMATS = [
    "%H:%M:%S",
    "%H:%M",
    "%H:%M:%S.%f",
    "%I:%M %p",
    "%I:%M:%S %p",
]


class Locale(BaseModel):
    """Locale-like parameters handed to the collectors."""

    model_config = ConfigDict(frozen=True)

    decimal_mark: str = Field(".", min_length=1, max_length=1)
    grouping_mark: str = Field(",", min_length=1, max_length=1)
    date_format: str = Field(
        "%Y-%m-%d", description="Fallback when a date column's format cannot be sniffed"
    )
    datetime_format: str | None = Field(
        None, description="Fallback for datetime columns; None means ISO 8601"
    )
    time_format: str = "%H:%M:%S"
    date_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))
    datetime_formats: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DATETIME_FORMATS)
    )
    time_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_TIME_FORMATS))
    true_values: list[str] = Field(
        default_factory=lambda: ["TRUE", "True", "true", "T"]
    )
    false_values: list[str] = Field(
        default_factory=lambda: ["FALSE", "False", "false", "F"]
    )

    @model_validator(mode="after")
    def _check_marks_differ(self) -> Locale:
        if self.decimal_mark == self.grouping_mark:
            raise ValueError(
                f"decimal_mark and grouping_mark must differ (both {self.decimal_mark!r})."
            )
        overlap = set(self.true_values) & set(self.false_values)
        if overlap:
            raise ValueError(
                f"Values {sorted(overlap)} appear in both true_values and false_values."
            )
        return self


class ReadOptions(BaseModel):
    """Options shared by resolution and parsing.

    Attributes:
        default: Rule for columns the user spec does not mention.
        guess_max: Maximum number of non-missing values sampled per column
            when guessing.
        strict: If True, a name/position that matches no column (or several,
            see ``tie_break``) raises ``UnresolvedColumnError``. If False it
            is recorded as a ``ResolutionWarning`` and the default rule
            applies instead.
        tie_break: ``"error"`` treats a name matching several headers as
            unresolved; ``"first"`` binds it to the first match.
        na: Strings treated as missing in every column.
        trim_ws: Strip surrounding whitespace from text cells before parsing.
        locale: Number marks and date/time patterns.
    """

    model_config = ConfigDict(frozen=True)

    default: CollectorSpec = Field(default_factory=lambda: CollectorSpec(tag=GUESS))
    guess_max: int = Field(1000, ge=1)
    strict: bool = True
    tie_break: Literal["error", "first"] = "error"
    na: list[str] = Field(default_factory=lambda: ["", "NA"])
    trim_ws: bool = True
    locale: Locale = Field(default_factory=Locale)


def load_col_types(path: str | Path) -> ColTypes:
    """Load and validate a column specification from YAML.

    The file holds ``default`` (a tag or a ``{tag, params}`` mapping) and
    ``cols`` (a mapping of header name or 0-based position to the same).

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Column spec file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigurationError(f"Column spec file is empty: {path}")
    logger.info("Loaded column spec from %s", path)
    return ColTypes.model_validate(raw)


def save_col_types(col_types: ColTypes, path: str | Path) -> None:
    """Serialise a ColTypes to YAML.

    Positions are written as integer keys and names as string keys, so a
    save/load round trip keeps the two kinds of reference apart.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "default": _dump_collector(col_types.default),
        "cols": {key: _dump_collector(spec) for key, spec in col_types.cols.items()},
    }
    with open(path, "w", encoding="utf-8") as f:
        f.write("# colspec column specification\n")
        f.write("# Keys under 'cols' are header names or 0-based positions.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved column spec to %s", path)


def _dump_collector(spec: CollectorSpec) -> str | dict:
    """Bare tag when there are no params, else the full mapping."""
    if not spec.params:
        return spec.tag
    return spec.model_dump(mode="json")
