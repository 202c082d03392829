"""
Column specification data model for colspec.

Key models:
- CollectorSpec: one parse rule -- a collector tag plus its parameters.
- ColumnIdentity: a column's position (canonical) and optional header name.
- ColumnSpec: an identity bound to a CollectorSpec.
- ColumnSpecification: the fully resolved, ordered rule set for a grid.
- ColTypes: the user-authored (partial) rule set, keyed by name or position,
  with a default rule. Condensation also produces this type.

Helpers ``cols()``, ``cols_only()`` and the ``col_*()`` constructors build
these models with less typing, e.g.::

    cols({"Age": col_integer(), "Has kids": "l"}, default="?")

All models are frozen Pydantic models: resolution and condensation always
return new values, and the same models serialise to YAML for persistence
(see ``colspec.config``).
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

GUESS = "guess"
SKIP = "skip"
LIST = "list"
CELL_DETAIL = "cell-detail"


class CollectorSpec(BaseModel):
    """A parse rule: collector tag plus parameters.

    A bare string is accepted wherever a CollectorSpec is expected and is
    read as the tag (or a shorthand code, mapped to its tag at resolution).
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    params: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"tag": data}
        return data

    @property
    def is_guess(self) -> bool:
        return self.tag == GUESS

    @property
    def is_skip(self) -> bool:
        return self.tag == SKIP

    def with_params(self, **params: Any) -> CollectorSpec:
        """Return a copy with *params* merged over the current ones."""
        return CollectorSpec(tag=self.tag, params={**self.params, **params})

    def __str__(self) -> str:
        if not self.params:
            return self.tag
        args = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{self.tag}({args})"


class ColumnIdentity(BaseModel):
    """Where a column lives: position always, name when headers exist."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=0)
    name: str | None = None

    @property
    def label(self) -> str:
        """Display name: the header name, or ``X1``, ``X2``... when headerless."""
        return self.name if self.name is not None else f"X{self.position + 1}"


class ColumnSpec(BaseModel):
    """One resolved column: identity + collector."""

    model_config = ConfigDict(frozen=True)

    identity: ColumnIdentity
    collector: CollectorSpec

    @property
    def position(self) -> int:
        return self.identity.position

    @property
    def tag(self) -> str:
        return self.collector.tag


class ColumnSpecification(BaseModel):
    """Fully resolved specification: one ColumnSpec per position, in order.

    ``default`` records the rule that unspecified columns were resolved
    with. It is informational: equivalence only compares the per-position
    entries.
    """

    model_config = ConfigDict(frozen=True)

    columns: tuple[ColumnSpec, ...] = ()
    default: CollectorSpec = Field(default_factory=lambda: CollectorSpec(tag=GUESS))

    @model_validator(mode="after")
    def _check_positions_unique(self) -> ColumnSpecification:
        seen: set[int] = set()
        for col in self.columns:
            if col.position in seen:
                raise ValueError(
                    f"Two column entries resolve to position {col.position}."
                )
            seen.add(col.position)
        return self

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def tags(self) -> list[str]:
        return [c.tag for c in self.columns]

    @property
    def labels(self) -> list[str]:
        return [c.identity.label for c in self.columns]

    @property
    def names(self) -> list[str | None]:
        return [c.identity.name for c in self.columns]

    def column(self, position: int) -> ColumnSpec:
        """Return the entry for *position*.

        Raises:
            KeyError: If no entry has that position.
        """
        for col in self.columns:
            if col.position == position:
                return col
        raise KeyError(position)

    def equivalent(self, other: ColumnSpecification) -> bool:
        """True when both specs have the same tag and params per position, in order."""
        if len(self.columns) != len(other.columns):
            return False
        return all(
            a.position == b.position and a.collector == b.collector
            for a, b in zip(self.columns, other.columns)
        )


class ColTypes(BaseModel):
    """A user-authored, possibly partial, column specification.

    ``cols`` maps a header name (``str``) or a 0-based position (``int``)
    to a CollectorSpec. Columns not listed use ``default``.
    """

    model_config = ConfigDict(frozen=True)

    cols: dict[int | str, CollectorSpec] = Field(default_factory=dict)
    default: CollectorSpec = Field(default_factory=lambda: CollectorSpec(tag=GUESS))

    def __len__(self) -> int:
        return len(self.cols)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def cols(
    spec: Mapping[int | str, CollectorSpec | str] | None = None,
    /,
    *,
    default: CollectorSpec | str = GUESS,
    **named: CollectorSpec | str,
) -> ColTypes:
    """Build a ColTypes from a mapping and/or keyword arguments.

    Keyword arguments are column names; use the mapping for names that are
    not valid identifiers or for positions.
    """
    merged: dict[int | str, CollectorSpec | str] = dict(spec or {})
    merged.update(named)
    return ColTypes.model_validate({"cols": merged, "default": default})


def cols_only(
    spec: Mapping[int | str, CollectorSpec | str] | None = None,
    /,
    **named: CollectorSpec | str,
) -> ColTypes:
    """Like ``cols()`` but every column not listed is skipped."""
    return cols(spec, default=SKIP, **named)


def _fmt_params(format: str | None) -> dict[str, Any]:
    return {"format": format} if format is not None else {}


def col_logical() -> CollectorSpec:
    return CollectorSpec(tag="logical")


def col_integer() -> CollectorSpec:
    return CollectorSpec(tag="integer")


def col_double() -> CollectorSpec:
    return CollectorSpec(tag="double")


def col_number() -> CollectorSpec:
    return CollectorSpec(tag="number")


def col_character() -> CollectorSpec:
    return CollectorSpec(tag="text")


def col_factor(levels: list[str] | None = None, ordered: bool = False) -> CollectorSpec:
    params: dict[str, Any] = {}
    if levels is not None:
        params["levels"] = list(levels)
    if ordered:
        params["ordered"] = True
    return CollectorSpec(tag="factor", params=params)


def col_date(format: str | None = None) -> CollectorSpec:
    return CollectorSpec(tag="date", params=_fmt_params(format))


def col_datetime(format: str | None = None) -> CollectorSpec:
    return CollectorSpec(tag="datetime", params=_fmt_params(format))


def col_time(format: str | None = None) -> CollectorSpec:
    return CollectorSpec(tag="time", params=_fmt_params(format))


def col_list() -> CollectorSpec:
    return CollectorSpec(tag=LIST)


def col_cell() -> CollectorSpec:
    return CollectorSpec(tag=CELL_DETAIL)


def col_skip() -> CollectorSpec:
    return CollectorSpec(tag=SKIP)


def col_guess() -> CollectorSpec:
    return CollectorSpec(tag=GUESS)
