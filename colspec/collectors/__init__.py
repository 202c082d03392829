"""
Collectors sub-package for colspec.

A collector bundles what it takes to turn raw cells into one target type:
parse function, parameter schema, shorthand code, guessing rank and pandas
output dtype.

- base.py: the ``Collector`` record, ``CellParseFailure`` and cell helpers.
- scalars.py: logical, integer, double, number, text, factor.
- dates.py: date, datetime, time (+ format sniffing).
- registry.py: ``CollectorRegistry`` and ``default_registry()``.
"""

from colspec.collectors.base import CellParseFailure, Collector, NoParams, TaggedValue
from colspec.collectors.registry import CollectorRegistry, default_registry

__all__ = [
    "CellParseFailure",
    "Collector",
    "CollectorRegistry",
    "NoParams",
    "TaggedValue",
    "default_registry",
]
