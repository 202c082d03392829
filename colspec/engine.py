"""
Parsing engine for colspec.

Applies a resolved ``ColumnSpecification`` to a ``RawGrid`` and returns a
``ParseResult``: one pandas Series per output column plus a list of
``ParseDiagnostic`` records.

Steps:
1. **Row shapes**: every row whose length differs from the column count
   gets one row-level diagnostic. Short rows read as missing cells, extra
   cells are ignored.
2. **Columns**: for each non-skipped column, each cell is
   - missing (``None``, NaN, ``options.na``) -> missing, no diagnostic;
   - passed through untouched (cell-detail columns);
   - guessed on its own and wrapped as ``[TaggedValue]`` (list columns);
   - otherwise parsed by the column's collector. A failure stores a
     missing value and appends a diagnostic; parsing carries on.

Columns share nothing, so ``workers > 1`` parses them on a thread pool.
Results are collected in column order, which keeps the output and the
diagnostics identical to a sequential run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from colspec.collectors.base import is_missing, unwrap
from colspec.collectors.registry import CollectorRegistry, default_registry
from colspec.config import ReadOptions
from colspec.exceptions import ConfigurationError
from colspec.grid import RawGrid
from colspec.guess import guess_value
from colspec.spec import ColumnIdentity, ColumnSpec, ColumnSpecification

if TYPE_CHECKING:
    from colspec.resolver import ResolutionWarning

logger = logging.getLogger(__name__)


@dataclass
class ParseDiagnostic:
    """One cell (or row) that did not conform.

    Attributes:
        row: 0-based row index in the grid.
        column: The column, or ``None`` for a row-length problem.
        raw_value: The offending raw value (row length for shape problems).
        tag: Collector tag that was attempted, ``None`` for shape problems.
        reason: Human-readable explanation.
    """
    row: int
    column: ColumnIdentity | None
    raw_value: Any
    tag: str | None
    reason: str

    @property
    def position(self) -> int | None:
        return self.column.position if self.column is not None else None


@dataclass
class TypedColumn:
    """A parsed output column."""
    identity: ColumnIdentity
    tag: str
    values: pd.Series

    @property
    def name(self) -> str:
        return self.identity.label


@dataclass
class ParseResult:
    """Standardized output of the parsing engine.

    Attributes:
        columns: Typed columns in output order (skipped columns absent).
            Failed and missing cells hold ``pd.NA`` / ``NaT``.
        diagnostics: Row-shape problems first, then cell failures in column
            order.
        spec: The resolved specification that was applied.
        n_rows: Number of grid rows.
        warnings: Resolution warnings carried over from lenient resolution.
    """
    columns: list[TypedColumn]
    diagnostics: list[ParseDiagnostic]
    spec: ColumnSpecification
    n_rows: int = 0
    warnings: list[ResolutionWarning] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def has_problems(self) -> bool:
        return bool(self.diagnostics)

    def column(self, key: int | str) -> TypedColumn:
        """Look up an output column by header name or source position.

        Raises:
            KeyError: If no output column matches (e.g. it was skipped).
        """
        for col in self.columns:
            if isinstance(key, int) and col.identity.position == key:
                return col
            if isinstance(key, str) and col.identity.name == key:
                return col
        raise KeyError(key)

    def to_frame(self) -> pd.DataFrame:
        """All typed columns as a DataFrame (labels may repeat)."""
        if not self.columns:
            return pd.DataFrame(index=pd.RangeIndex(self.n_rows))
        return pd.concat([c.values.rename(c.name) for c in self.columns], axis=1)

    def problems(self) -> pd.DataFrame:
        """Diagnostics as a DataFrame: row, col, name, expected, actual, reason."""
        records = [
            {
                "row": d.row,
                "col": d.position,
                "name": d.column.label if d.column is not None else None,
                "expected": d.tag,
                "actual": d.raw_value,
                "reason": d.reason,
            }
            for d in self.diagnostics
        ]
        return pd.DataFrame(
            records, columns=["row", "col", "name", "expected", "actual", "reason"]
        )


class ParsingEngine:
    """Applies resolved specifications to grids.

    The engine is **stateless**: each ``run()`` works only on its inputs,
    and the registry is only read.
    """

    def __init__(
        self,
        options: ReadOptions | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.options = options or ReadOptions()
        self.registry = registry if registry is not None else default_registry()

    def run(
        self,
        grid: RawGrid,
        spec: ColumnSpecification,
        workers: int | None = None,
    ) -> ParseResult:
        """Parse *grid* according to *spec*.

        Args:
            grid: Raw rows (and header) to parse.
            spec: A fully resolved specification for this grid.
            workers: Thread count for per-column parsing; ``None`` or 1
                parses sequentially.

        Raises:
            ConfigurationError: If *spec* still contains ``guess`` rules or
                unknown tags.
        """
        for col in spec.columns:
            if col.collector.is_guess:
                raise ConfigurationError(
                    f"Column {col.identity.label} is still 'guess'; resolve the "
                    "specification before parsing."
                )
            self.registry.get(col.tag)

        # -- Step 1: Row shapes ---------------------------------------------
        n_columns = len(spec.columns)
        logger.info("Step 1/2: Checking %d rows against %d columns", grid.n_rows, n_columns)
        diagnostics = self._check_shapes(grid, n_columns)

        # -- Step 2: Columns ------------------------------------------------
        output = [c for c in spec.columns if self.registry.get(c.tag).emits_output]
        logger.info(
            "Step 2/2: Parsing %d columns (%d skipped)",
            len(output), n_columns - len(output),
        )
        if workers and workers > 1 and len(output) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                parsed = list(pool.map(lambda c: self._parse_column(grid, c), output))
        else:
            parsed = [self._parse_column(grid, c) for c in output]

        columns = [typed for typed, _ in parsed]
        for _, column_diagnostics in parsed:
            diagnostics.extend(column_diagnostics)

        logger.info(
            "Parsed %d rows x %d columns, %d diagnostics",
            grid.n_rows, len(columns), len(diagnostics),
        )
        return ParseResult(
            columns=columns, diagnostics=diagnostics, spec=spec, n_rows=grid.n_rows
        )

    def _check_shapes(self, grid: RawGrid, n_columns: int) -> list[ParseDiagnostic]:
        diagnostics: list[ParseDiagnostic] = []
        for i, row in enumerate(grid.rows):
            if len(row) != n_columns:
                diagnostics.append(
                    ParseDiagnostic(
                        row=i,
                        column=None,
                        raw_value=len(row),
                        tag=None,
                        reason=f"expected {n_columns} columns, got {len(row)}",
                    )
                )
        return diagnostics

    def _parse_column(
        self, grid: RawGrid, col: ColumnSpec
    ) -> tuple[TypedColumn, list[ParseDiagnostic]]:
        collector = self.registry.get(col.tag)
        params = collector.validate_params(col.collector.params)
        values: list[Any] = []
        diagnostics: list[ParseDiagnostic] = []

        for i, raw in enumerate(grid.column_values(col.position)):
            if collector.passthrough:
                values.append(raw)
                continue
            if is_missing(raw, self.options):
                values.append(None)
                continue
            value = unwrap(raw)
            if collector.per_cell_guess:
                values.append([guess_value(value, self.options, self.registry)])
                continue
            try:
                values.append(collector.parse(value, params, self.options))
            except (ValueError, TypeError) as exc:
                values.append(None)
                diagnostics.append(
                    ParseDiagnostic(
                        row=i, column=col.identity, raw_value=raw, tag=col.tag, reason=str(exc)
                    )
                )

        series = collector.to_series(values, params)
        if diagnostics:
            logger.debug("Column %s: %d cells failed", col.identity.label, len(diagnostics))
        return TypedColumn(identity=col.identity, tag=col.tag, values=series), diagnostics


def parse_grid(
    grid: RawGrid,
    spec: ColumnSpecification,
    options: ReadOptions | None = None,
    registry: CollectorRegistry | None = None,
    workers: int | None = None,
) -> ParseResult:
    """Functional wrapper around ``ParsingEngine(options, registry).run()``."""
    return ParsingEngine(options, registry).run(grid, spec, workers=workers)
