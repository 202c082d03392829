"""
Type guessing for colspec.

Infers a column's collector from a sample of its raw values when the user
gave no explicit type (or asked for ``guess``).

Algorithm:
1. Drop missing values (``None``, NaN, strings listed in ``options.na``)
   and take the first ``options.guess_max`` of what remains.
2. Walk the registry's guessable collectors from most to least specific
   (logical -> integer -> double -> date -> datetime -> time -> text).
3. Return the first collector that accepts **every** sampled value, with
   any parameters it sniffed (e.g. a date ``format``).

Ties are settled by that fixed order, never by how many values a type
matched. An empty sample guesses text, and since text accepts anything the
guesser never fails.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from colspec.collectors.base import TaggedValue, is_missing, unwrap
from colspec.collectors.registry import CollectorRegistry, default_registry
from colspec.config import ReadOptions
from colspec.spec import CollectorSpec

logger = logging.getLogger(__name__)

_FALLBACK_TAG = "text"


def sample_values(values: Iterable[Any], options: ReadOptions) -> list[Any]:
    """First ``options.guess_max`` non-missing values, unwrapped from RawCell."""
    sample: list[Any] = []
    for value in values:
        if is_missing(value, options):
            continue
        sample.append(unwrap(value))
        if len(sample) >= options.guess_max:
            break
    return sample


def guess_type(
    values: Iterable[Any],
    options: ReadOptions | None = None,
    registry: CollectorRegistry | None = None,
) -> CollectorSpec:
    """Guess the most specific collector that fits every sampled value.

    Args:
        values: Raw values of one column, in row order.
        options: Sampling size, missing-value strings and locale.
        registry: Collectors to choose from. Defaults to the built-ins.

    Returns:
        A concrete CollectorSpec (never ``guess``).
    """
    options = options or ReadOptions()
    registry = registry if registry is not None else default_registry()
    sample = sample_values(values, options)
    if not sample:
        return CollectorSpec(tag=_FALLBACK_TAG)

    for collector in registry.guessable():
        params = collector.accepts_all(sample, options)
        if params is not None:
            logger.debug(
                "Guessed '%s' %s from %d sampled values", collector.tag, params, len(sample)
            )
            return CollectorSpec(tag=collector.tag, params=params)
    return CollectorSpec(tag=_FALLBACK_TAG)


def guess_value(
    value: Any,
    options: ReadOptions | None = None,
    registry: CollectorRegistry | None = None,
) -> TaggedValue | None:
    """Guess and parse a single cell.

    Returns:
        ``TaggedValue(tag, typed_value)``, or ``None`` for a missing cell.
    """
    options = options or ReadOptions()
    registry = registry if registry is not None else default_registry()
    if is_missing(value, options):
        return None
    value = unwrap(value)
    for collector in registry.guessable():
        params = collector.accepts_all([value], options)
        if params is not None:
            model = collector.validate_params(params)
            return TaggedValue(collector.tag, collector.parse(value, model, options))
    return TaggedValue(_FALLBACK_TAG, str(value))
