"""
Spec resolution for colspec.

Reconciles a user-authored column specification with the columns a grid
actually has, producing a ``ColumnSpecification`` in which every position
holds a concrete collector.

Accepted user input:
- ``None``: every column follows ``options.default`` (normally ``guess``).
- ``str``: shorthand, one code per column (``"?i_"``).
- ``list`` / ``tuple``: one rule per column, in order.
- ``ColTypes`` or a plain mapping: rules keyed by header name or position;
  unlisted columns follow the default rule.

Per position the rule comes from, in priority order:
  1. an explicit entry (by name or index),
  2. the shorthand code at that position,
  3. the default rule.
``guess`` rules are then replaced by the Type Guesser's answer, and
collectors with ``fill_params`` (date-like ones) get their missing
``format`` sniffed from the sample. Each tier is a separate step, so
resolution is deterministic for a given (spec, header, sample).

Structural problems raise before any parsing happens: ShapeMismatch for a
wrong-length shorthand or list, ConfigurationError for an unknown code,
tag or parameter, UnresolvedColumnError for a name/index matching zero or
several columns. With ``options.strict=False`` unresolved references are
downgraded to ``ResolutionWarning`` entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from colspec.collectors.registry import CollectorRegistry, default_registry
from colspec.config import ReadOptions
from colspec.exceptions import ConfigurationError, ShapeMismatch, UnresolvedColumnError
from colspec.grid import RawGrid
from colspec.guess import guess_type, sample_values
from colspec.spec import (
    ColTypes,
    CollectorSpec,
    ColumnIdentity,
    ColumnSpec,
    ColumnSpecification,
)

logger = logging.getLogger(__name__)

UserSpec = Union[
    None,
    str,
    Sequence[Union[CollectorSpec, str]],
    Mapping[Union[int, str], Union[CollectorSpec, str]],
    ColTypes,
]


@dataclass
class ResolutionWarning:
    """A column reference that could not be bound, recorded in lenient mode."""
    reference: str | int
    matches: list[int]
    reason: str


@dataclass
class Resolution:
    """Output of ``SpecResolver.resolve()``.

    Attributes:
        spec: The fully resolved ColumnSpecification.
        defaulted: Positions with no explicit or shorthand entry, resolved
            through the default rule.
        guessed: Positions whose collector came from the Type Guesser.
        warnings: Unresolved references (lenient mode only).
    """
    spec: ColumnSpecification
    defaulted: list[int] = field(default_factory=list)
    guessed: list[int] = field(default_factory=list)
    warnings: list[ResolutionWarning] = field(default_factory=list)


class SpecResolver:
    """Resolves user specifications against grids.

    Stateless apart from its options and registry; one instance can
    resolve any number of grids.
    """

    def __init__(
        self,
        options: ReadOptions | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.options = options or ReadOptions()
        self.registry = registry if registry is not None else default_registry()

    def resolve(self, grid: RawGrid, col_types: UserSpec = None) -> Resolution:
        """Resolve *col_types* against *grid*.

        Raises:
            ShapeMismatch: Shorthand or list length differs from column count.
            ConfigurationError: Unknown code/tag/parameter, or two entries
                bound to one position.
            UnresolvedColumnError: A reference matching zero or several
                columns, in strict mode.
        """
        n_columns = grid.n_columns
        names = list(grid.header) if grid.header is not None else None

        explicit: dict[int, CollectorSpec] = {}
        shorthand: list[CollectorSpec] | None = None
        default = self.options.default
        warnings: list[ResolutionWarning] = []

        if col_types is None:
            pass
        elif isinstance(col_types, str):
            shorthand = self._parse_shorthand(col_types, n_columns)
        elif isinstance(col_types, ColTypes):
            default = col_types.default
            explicit = self._bind(col_types.cols, names, n_columns, warnings)
        elif isinstance(col_types, Mapping):
            parsed = ColTypes.model_validate({"cols": dict(col_types), "default": default})
            explicit = self._bind(parsed.cols, names, n_columns, warnings)
        elif isinstance(col_types, (list, tuple)):
            if len(col_types) != n_columns:
                raise ShapeMismatch(n_columns, len(col_types), "specification list")
            explicit = {
                i: CollectorSpec.model_validate(rule) for i, rule in enumerate(col_types)
            }
        else:
            raise ConfigurationError(
                f"Unsupported column specification of type {type(col_types).__name__}."
            )

        default = self._canonical(default)
        columns: list[ColumnSpec] = []
        defaulted: list[int] = []
        guessed: list[int] = []

        for position in range(n_columns):
            # Tier 1: explicit -> tier 2: shorthand -> tier 3: default
            if position in explicit:
                rule = explicit[position]
            elif shorthand is not None:
                rule = shorthand[position]
            else:
                rule = default
                defaulted.append(position)

            rule = self._canonical(rule)
            sample: list[Any] | None = None
            if rule.is_guess:
                sample = self._sample(grid, position)
                rule = guess_type(sample, self.options, self.registry)
                guessed.append(position)
            rule = self._complete(rule, grid, position, sample)

            identity = ColumnIdentity(
                position=position,
                name=names[position] if names is not None else None,
            )
            logger.debug("Column %s resolved to %s", identity.label, rule)
            columns.append(ColumnSpec(identity=identity, collector=rule))

        spec = ColumnSpecification(columns=tuple(columns), default=default)
        logger.info(
            "Resolved %d columns (%d defaulted, %d guessed, %d warnings)",
            n_columns, len(defaulted), len(guessed), len(warnings),
        )
        return Resolution(spec=spec, defaulted=defaulted, guessed=guessed, warnings=warnings)

    # -- Tier helpers -------------------------------------------------------

    def _parse_shorthand(self, text: str, n_columns: int) -> list[CollectorSpec]:
        if len(text) != n_columns:
            raise ShapeMismatch(n_columns, len(text), "shorthand string")
        return [CollectorSpec(tag=self.registry.tag_for_code(code)) for code in text]

    def _bind(
        self,
        entries: Mapping[int | str, CollectorSpec],
        names: list[str] | None,
        n_columns: int,
        warnings: list[ResolutionWarning],
    ) -> dict[int, CollectorSpec]:
        """Map each name/index reference to exactly one position."""
        bound: dict[int, CollectorSpec] = {}
        owners: dict[int, int | str] = {}
        for reference, rule in entries.items():
            try:
                position = self._locate(reference, names, n_columns)
            except UnresolvedColumnError as exc:
                if self.options.strict:
                    raise
                warnings.append(
                    ResolutionWarning(reference=reference, matches=exc.matches, reason=str(exc))
                )
                logger.warning("Ignoring column reference %r: %s", reference, exc)
                continue
            if position in bound:
                raise ConfigurationError(
                    f"Column references {owners[position]!r} and {reference!r} both "
                    f"resolve to position {position}."
                )
            bound[position] = rule
            owners[position] = reference
        return bound

    def _locate(self, reference: int | str, names: list[str] | None, n_columns: int) -> int:
        if isinstance(reference, int) and not isinstance(reference, bool):
            if 0 <= reference < n_columns:
                return reference
            raise UnresolvedColumnError(
                reference, [],
                f"Column position {reference} is out of range for {n_columns} columns.",
            )
        if names is None:
            raise UnresolvedColumnError(
                reference, [],
                f"Column name {reference!r} given but the data has no header.",
            )
        matches = [i for i, name in enumerate(names) if name == reference]
        if not matches:
            raise UnresolvedColumnError(
                reference, [],
                f"Column name {reference!r} matches no header. Available: {names}",
            )
        if len(matches) > 1:
            if self.options.tie_break == "first":
                return matches[0]
            raise UnresolvedColumnError(
                reference, matches,
                f"Column name {reference!r} is ambiguous: it matches positions {matches}.",
            )
        return matches[0]

    # -- Rule helpers -------------------------------------------------------

    def _canonical(self, rule: CollectorSpec) -> CollectorSpec:
        """Map a shorthand code to its tag and normalise parameters."""
        collector = self.registry.lookup(rule.tag)
        return CollectorSpec(tag=collector.tag, params=collector.canonical_params(rule.params))

    def _complete(
        self,
        rule: CollectorSpec,
        grid: RawGrid,
        position: int,
        sample: list[Any] | None,
    ) -> CollectorSpec:
        collector = self.registry.get(rule.tag)
        if collector.fill_params is None:
            return rule
        if sample is None:
            sample = self._sample(grid, position)
        params = collector.fill_params(dict(rule.params), sample, self.options)
        return CollectorSpec(tag=rule.tag, params=collector.canonical_params(params))

    def _sample(self, grid: RawGrid, position: int) -> list[Any]:
        return sample_values(grid.column_values(position), self.options)


def resolve_spec(
    grid: RawGrid,
    col_types: UserSpec = None,
    options: ReadOptions | None = None,
    registry: CollectorRegistry | None = None,
) -> Resolution:
    """Functional wrapper around ``SpecResolver(options, registry).resolve()``."""
    return SpecResolver(options, registry).resolve(grid, col_types)
