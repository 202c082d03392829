"""
Collector record and shared cell helpers for colspec.

A *collector* is everything the resolver and the engine need to know about
one target type, bundled in a single record:

- ``parse(value, params, options)`` turns one non-missing raw value into a
  typed value, or raises ``CellParseFailure``.
- ``params_schema`` is a Pydantic model validating the collector's
  parameters (``extra="forbid"``, so unknown parameters are rejected).
- ``shorthand`` / ``aliases`` are the single-character codes used in
  compact string specs.
- ``guess_rank`` places the collector in the guessing order (lower = more
  specific); ``None`` keeps it out of guessing.
- ``sniff`` / ``fill_params`` infer parameters (e.g. a date format) from a
  sample of values.
- ``dtype`` / ``build_series`` decide how parsed values become a pandas
  Series.

Capability flags (``emits_output``, ``passthrough``, ``per_cell_guess``)
describe the structural collectors (skip, cell-detail, list) so the engine
never switches on tag names. Adding a type means building one more record.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, NamedTuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, ValidationError

from colspec.exceptions import ConfigurationError
from colspec.grid import RawCell

if TYPE_CHECKING:
    from colspec.config import ReadOptions


class CellParseFailure(ValueError):
    """One raw value does not conform to its column's type.

    Raised by parse functions and caught by the parsing engine, which turns
    it into a ``ParseDiagnostic``. Not part of the ``ColSpecError``
    hierarchy.
    """


class TaggedValue(NamedTuple):
    """A value carrying its own type tag (one cell of a list column)."""
    tag: str
    value: Any


class NoParams(BaseModel):
    """Parameter schema for collectors that take no parameters."""

    model_config = ConfigDict(extra="forbid", frozen=True)


ParseFn = Callable[[Any, BaseModel, "ReadOptions"], Any]
SniffFn = Callable[[list, "ReadOptions"], "dict[str, Any] | None"]
FillFn = Callable[["dict[str, Any]", list, "ReadOptions"], "dict[str, Any]"]
SeriesFn = Callable[[list, BaseModel], pd.Series]


@dataclass(frozen=True)
class Collector:
    """Capability record for one collector tag."""

    tag: str
    parse: ParseFn | None = None
    params_schema: type[BaseModel] = NoParams
    shorthand: str | None = None
    aliases: tuple[str, ...] = ()
    dtype: str | None = None
    guess_rank: int | None = None
    sniff: SniffFn | None = None
    fill_params: FillFn | None = None
    build_series: SeriesFn | None = None
    emits_output: bool = True
    passthrough: bool = False
    per_cell_guess: bool = False

    @property
    def codes(self) -> tuple[str, ...]:
        """All shorthand codes (primary first)."""
        primary = (self.shorthand,) if self.shorthand else ()
        return primary + tuple(self.aliases)

    def validate_params(self, params: dict[str, Any]) -> BaseModel:
        """Validate *params* against the schema.

        Raises:
            ConfigurationError: On unknown or invalid parameters.
        """
        try:
            return self.params_schema.model_validate(params)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid parameters for collector '{self.tag}': {params!r}\n{exc}"
            ) from exc

    def canonical_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """Validated params with default values dropped, for stable comparison."""
        return self.validate_params(params).model_dump(exclude_defaults=True)

    def accepts_all(self, values: list, options: ReadOptions) -> dict[str, Any] | None:
        """Parameters under which every value parses, or ``None``.

        *values* must already be non-missing and unwrapped.
        """
        if self.sniff is not None:
            return self.sniff(values, options)
        if self.parse is None:
            return None
        model = self.params_schema()
        for value in values:
            try:
                self.parse(value, model, options)
            except ValueError:
                return None
        return {}

    def to_series(self, values: list, params: BaseModel) -> pd.Series:
        """Wrap parsed values (``None`` = missing) in a pandas Series."""
        if self.build_series is not None:
            return self.build_series(values, params)
        if self.dtype is not None:
            return pd.Series(values, dtype=self.dtype)
        return pd.Series([pd.NA if v is None else v for v in values], dtype=object)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def unwrap(value: Any) -> Any:
    """Return the scalar payload of a raw cell."""
    if isinstance(value, RawCell):
        return value.value
    return value


def clean_text(value: str, options: ReadOptions) -> str:
    return value.strip() if options.trim_ws else value


def is_missing(value: Any, options: ReadOptions) -> bool:
    """True for ``None``, NaN, NA-likes and strings listed in ``options.na``."""
    value = unwrap(value)
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return clean_text(value, options) in options.na
    return False
