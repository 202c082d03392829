"""
Spec condensation for colspec.

The inverse of resolution: turns a fully resolved ColumnSpecification into
the shortest equivalent user spec.

- If every column shares one rule, the result is a ``ColTypes`` with that
  rule as ``default`` and no entries.
- Otherwise the most frequent rule (ties: the one seen first) becomes the
  default and every other column is listed as an exception, keyed by its
  header name when that name is unique, else by position.
- With ``shorthand=True``, and when every rule has a shorthand code and no
  parameters, the one-code-per-column string is returned instead.

Condensation is lossless: resolving the result against the same header
reproduces an equivalent specification. It is also idempotent: a
``ColTypes`` only loses entries equal to its default, and a shorthand
string is returned unchanged.
"""

from __future__ import annotations

import logging
from collections import Counter

from colspec.collectors.registry import CollectorRegistry, default_registry
from colspec.spec import ColTypes, CollectorSpec, ColumnSpecification

logger = logging.getLogger(__name__)


def _most_common(rules: list[CollectorSpec]) -> CollectorSpec:
    """Most frequent rule; ties go to the one that appears first."""
    best = rules[0]
    best_count = 0
    seen: list[CollectorSpec] = []
    for rule in rules:
        if rule in seen:
            continue
        seen.append(rule)
        count = sum(1 for r in rules if r == rule)
        if count > best_count:
            best, best_count = rule, count
    return best


def to_shorthand(
    spec: ColumnSpecification,
    registry: CollectorRegistry | None = None,
) -> str | None:
    """The shorthand string for *spec*, or ``None`` if a rule has no code or has params."""
    registry = registry if registry is not None else default_registry()
    codes: list[str] = []
    for col in spec.columns:
        if col.collector.params:
            return None
        if col.tag not in registry:
            return None
        code = registry.get(col.tag).shorthand
        if code is None:
            return None
        codes.append(code)
    return "".join(codes)


def condense(
    spec: ColumnSpecification | ColTypes | str,
    shorthand: bool = False,
    registry: CollectorRegistry | None = None,
) -> ColTypes | str:
    """Return the most compact equivalent of *spec*.

    Args:
        spec: A resolved specification, or an already condensed one.
        shorthand: Prefer the shorthand string when it is lossless.
        registry: Registry used to look up shorthand codes.

    Returns:
        A ``ColTypes`` (default + exceptions) or a shorthand ``str``.
    """
    if isinstance(spec, str):
        return spec
    if isinstance(spec, ColTypes):
        return ColTypes(
            cols={k: v for k, v in spec.cols.items() if v != spec.default},
            default=spec.default,
        )

    if shorthand:
        code = to_shorthand(spec, registry)
        if code is not None:
            logger.debug("Condensed %d columns to shorthand %r", len(spec), code)
            return code

    rules = [col.collector for col in spec.columns]
    if not rules:
        return ColTypes(default=spec.default)

    default = _most_common(rules)
    name_counts = Counter(name for name in spec.names if name is not None)
    exceptions: dict[int | str, CollectorSpec] = {}
    for col in spec.columns:
        if col.collector == default:
            continue
        name = col.identity.name
        key: int | str = name if name is not None and name_counts[name] == 1 else col.position
        exceptions[key] = col.collector

    logger.debug(
        "Condensed %d columns to default %s + %d exceptions",
        len(rules), default, len(exceptions),
    )
    return ColTypes(cols=exceptions, default=default)
