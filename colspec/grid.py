"""
Raw tabular input for colspec.

The core never reads files or talks to remote sources. A collaborator
materialises the data as a ``RawGrid``: rows of untyped values plus an
optional header. Cells are plain strings for delimited text, native scalars
(``int``, ``float``, ``bool``, ``date``, ``datetime``, ``None``) for richer
sources, or ``RawCell`` records when a spreadsheet source exposes
formatting, formulas and links.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Sequence, Union

import pandas as pd


@dataclass(frozen=True)
class RawCell:
    """A rich spreadsheet cell.

    Scalar collectors parse ``value``; the cell-detail collector passes the
    whole record through untouched.
    """
    value: Any = None
    formatted: str | None = None
    formula: str | None = None
    hyperlink: str | None = None
    note: str | None = None
    cell_type: str | None = None


RawValue = Union[str, int, float, bool, date, datetime, RawCell, None]


@dataclass(frozen=True)
class RawGrid:
    """Rows of raw values plus an optional header.

    Attributes:
        rows: The data rows. Rows may be ragged; the parsing engine reports
            rows whose length differs from ``n_columns``.
        header: Column names, not necessarily unique. ``None`` when the
            source has no header row.
    """
    rows: Sequence[Sequence[RawValue]] = field(default_factory=tuple)
    header: Sequence[str] | None = None

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    @property
    def n_columns(self) -> int:
        """Header length when there is a header, else the first row's length."""
        if self.header is not None:
            return len(self.header)
        if self.rows:
            return len(self.rows[0])
        return 0

    def column_values(self, position: int, limit: int | None = None) -> list[RawValue]:
        """Raw values of one column; short rows contribute ``None``."""
        rows = self.rows if limit is None else self.rows[:limit]
        return [row[position] if position < len(row) else None for row in rows]

    @classmethod
    def from_frame(cls, df: pd.DataFrame, header: bool = True) -> RawGrid:
        """Build a grid from a pandas DataFrame.

        Intended for frames read with ``dtype=str, keep_default_na=False``
        so every cell is still raw text. NaN cells become ``None``.

        Args:
            df: Source frame.
            header: If True, the frame's column labels become the header.
        """
        cleaned = df.astype(object).where(df.notna(), None)
        rows = [tuple(r) for r in cleaned.itertuples(index=False, name=None)]
        names = [str(c) for c in df.columns] if header else None
        return cls(rows=rows, header=names)
