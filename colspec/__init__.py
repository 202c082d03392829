"""
colspec: column specifications and typed parsing for raw tabular data.

Public API surface:

- ``read_grid(grid, header, col_types, ...)`` -- **recommended entry
  point**. Resolves the column specification against the grid, then parses
  every cell. Returns a ``ParseResult`` (typed pandas columns +
  diagnostics).

- ``resolve(grid, header, col_types, ...)`` -- "dry" resolution only.
  Returns a ``Resolution`` whose ``spec`` can be inspected, condensed or
  saved, without parsing any cell.

- ``condense(spec)`` -- shortest equivalent form of a resolved spec.

- ``guess_type(values)`` / ``guess_value(value)`` -- the type guesser.

- ``cols()``, ``cols_only()``, ``col_*()`` -- spec builders.

``col_types`` may be omitted (guess everything), a shorthand string such as
``"?i_"``, a list with one rule per column, a mapping of header names /
positions to rules, or a ``ColTypes``.

Example::

    result = colspec.read_grid(
        [["Ann", "34", "TRUE"], ["Bo", "7", "FALSE"]],
        header=["Name", "Age", "Has kids"],
        col_types={"Age": "integer", "Has kids": colspec.col_logical()},
    )
    df = result.to_frame()
"""

from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from colspec.collectors import (
    CellParseFailure,
    Collector,
    CollectorRegistry,
    TaggedValue,
    default_registry,
)
from colspec.condenser import condense, to_shorthand
from colspec.config import Locale, ReadOptions, load_col_types, save_col_types
from colspec.engine import ParseDiagnostic, ParseResult, ParsingEngine, TypedColumn
from colspec.exceptions import (
    ColSpecError,
    ConfigurationError,
    ShapeMismatch,
    UnresolvedColumnError,
)
from colspec.grid import RawCell, RawGrid
from colspec.guess import guess_type, guess_value
from colspec.resolver import Resolution, ResolutionWarning, SpecResolver, UserSpec
from colspec.spec import (
    ColTypes,
    CollectorSpec,
    ColumnIdentity,
    ColumnSpec,
    ColumnSpecification,
    col_cell,
    col_character,
    col_date,
    col_datetime,
    col_double,
    col_factor,
    col_guess,
    col_integer,
    col_list,
    col_logical,
    col_number,
    col_skip,
    col_time,
    cols,
    cols_only,
)

__all__ = [
    "read_grid",
    "resolve",
    "condense",
    "to_shorthand",
    "guess_type",
    "guess_value",
    "cols",
    "cols_only",
    "col_cell",
    "col_character",
    "col_date",
    "col_datetime",
    "col_double",
    "col_factor",
    "col_guess",
    "col_integer",
    "col_list",
    "col_logical",
    "col_number",
    "col_skip",
    "col_time",
    "load_col_types",
    "save_col_types",
    "default_registry",
    "CellParseFailure",
    "ColSpecError",
    "ColTypes",
    "Collector",
    "CollectorRegistry",
    "CollectorSpec",
    "ColumnIdentity",
    "ColumnSpec",
    "ColumnSpecification",
    "ConfigurationError",
    "Locale",
    "ParseDiagnostic",
    "ParseResult",
    "ParsingEngine",
    "RawCell",
    "RawGrid",
    "ReadOptions",
    "Resolution",
    "ResolutionWarning",
    "ShapeMismatch",
    "SpecResolver",
    "TaggedValue",
    "TypedColumn",
    "UnresolvedColumnError",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _as_grid(
    grid: RawGrid | pd.DataFrame | Sequence[Sequence],
    header: Sequence[str] | None,
) -> RawGrid:
    """Normalise the accepted grid inputs to a RawGrid.

    An explicit *header* overrides the header of a RawGrid or the column
    labels of a DataFrame.
    """
    if isinstance(grid, pd.DataFrame):
        grid = RawGrid.from_frame(grid)
    elif not isinstance(grid, RawGrid):
        grid = RawGrid(rows=list(grid))
    if header is not None:
        grid = RawGrid(rows=grid.rows, header=list(header))
    return grid


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve(
    grid: RawGrid | pd.DataFrame | Sequence[Sequence],
    header: Sequence[str] | None = None,
    col_types: UserSpec = None,
    *,
    options: ReadOptions | None = None,
    registry: CollectorRegistry | None = None,
) -> Resolution:
    """Resolve a column specification without parsing any cell.

    Orchestration:
      1. Normalise *grid* / *header* to a ``RawGrid``.
      2. ``SpecResolver.resolve()`` -- explicit > shorthand > default per
         position, guessing where the rule is ``guess``.

    Args:
        grid: Raw rows (a ``RawGrid``, a DataFrame of strings, or a
            sequence of rows). Only a sample is read, for guessing.
        header: Column names; overrides any header carried by *grid*.
        col_types: The user specification (see module docstring).
        options: Resolution options; defaults to ``ReadOptions()``.
        registry: Collector registry; defaults to the built-ins.

    Returns:
        A ``Resolution`` with the resolved spec, the defaulted and guessed
        positions, and lenient-mode warnings.

    Raises:
        ShapeMismatch: If a shorthand string or rule list has the wrong length.
        ConfigurationError: If the specification is malformed.
        UnresolvedColumnError: If a column reference matches zero or several
            columns (strict mode).
    """
    raw = _as_grid(grid, header)
    logger.info("resolve() -- %d rows x %d columns", raw.n_rows, raw.n_columns)
    return SpecResolver(options, registry).resolve(raw, col_types)


def read_grid(
    grid: RawGrid | pd.DataFrame | Sequence[Sequence],
    header: Sequence[str] | None = None,
    col_types: UserSpec = None,
    *,
    options: ReadOptions | None = None,
    registry: CollectorRegistry | None = None,
    workers: int | None = None,
) -> ParseResult:
    """Resolve a column specification and parse the grid with it.

    Orchestration:
      1. ``resolve()`` -> ``Resolution`` (structural errors raise here,
         before any cell is parsed).
      2. ``ParsingEngine.run()`` -> ``ParseResult`` (cell failures become
         diagnostics, never exceptions).

    Args:
        grid: Raw rows (a ``RawGrid``, a DataFrame of strings, or a
            sequence of rows).
        header: Column names; overrides any header carried by *grid*.
        col_types: The user specification (see module docstring).
        options: Resolution/parsing options; defaults to ``ReadOptions()``.
        registry: Collector registry; defaults to the built-ins.
        workers: Parse columns on this many threads (output is identical
            to a sequential run).

    Returns:
        A ``ParseResult``; check ``result.diagnostics`` (or
        ``result.problems()``) for cells that failed to parse.

    Raises:
        ShapeMismatch: If a shorthand string or rule list has the wrong length.
        ConfigurationError: If the specification is malformed.
        UnresolvedColumnError: If a column reference matches zero or several
            columns (strict mode).
    """
    raw = _as_grid(grid, header)
    registry = registry if registry is not None else default_registry()
    options = options or ReadOptions()
    logger.info("read_grid() -- %d rows x %d columns", raw.n_rows, raw.n_columns)

    resolution = SpecResolver(options, registry).resolve(raw, col_types)
    result = ParsingEngine(options, registry).run(raw, resolution.spec, workers=workers)
    result.warnings = list(resolution.warnings)
    return result
