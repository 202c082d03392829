"""
Scalar collectors for colspec: logical, integer, double, number, text, factor.

Every parse function receives one **non-missing, unwrapped** raw value
(missing detection happens in the engine), the validated parameter model,
and the ReadOptions. It returns the typed value or raises
``CellParseFailure`` with a short reason.

Numeric strings honour the locale marks:
- ``integer`` / ``double`` accept only a plain number (optional sign,
  ``decimal_mark`` for double, exponent). ``"1,000"`` is *not* an integer.
- ``number`` is the forgiving variant: grouping marks are stripped and the
  first number in the cell is taken, so ``"$1,234.50"`` and ``"12%"``
  parse (to 1234.5 and 12.0).

Native values from rich sources are accepted where they fit: ``bool`` for
logical only (``bool`` is an ``int`` subclass, so integer/double reject it
explicitly), ``int``/integral ``float`` for integer, any real for double.

``double`` reads ``"Inf"``, ``"-Inf"`` and ``"NaN"``. The nullable
``Float64`` output stores NaN as missing, the same as a native NaN cell,
so a ``"NaN"`` cell reads as ``<NA>`` without a diagnostic.
"""

from __future__ import annotations

import functools
import re
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any

import pandas as pd
from pydantic import BaseModel, ConfigDict

from colspec.collectors.base import CellParseFailure, Collector, clean_text

if TYPE_CHECKING:
    from colspec.config import ReadOptions

_INT_RE = re.compile(r"[+-]?\d+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_SPECIAL_DOUBLES = {"Inf": float("inf"), "-Inf": float("-inf"), "NaN": float("nan")}


@functools.lru_cache(maxsize=None)
def _double_re(decimal_mark: str) -> re.Pattern[str]:
    d = re.escape(decimal_mark)
    return re.compile(rf"[+-]?(?:\d+(?:{d}\d*)?|{d}\d+)(?:[eE][+-]?\d+)?")


def _describe(value: Any) -> str:
    return f"{value!r} ({type(value).__name__})" if not isinstance(value, str) else repr(value)


# ---------------------------------------------------------------------------
# logical
# ---------------------------------------------------------------------------

def parse_logical(value: Any, params: BaseModel, options: ReadOptions) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = clean_text(value, options)
        if text in options.locale.true_values:
            return True
        if text in options.locale.false_values:
            return False
    raise CellParseFailure(f"expected a logical value, got {_describe(value)}")


# ---------------------------------------------------------------------------
# integer
# ---------------------------------------------------------------------------

def parse_integer(value: Any, params: BaseModel, options: ReadOptions) -> int:
    if isinstance(value, bool):
        raise CellParseFailure(f"expected an integer, got {_describe(value)}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise CellParseFailure(f"expected an integer, got {_describe(value)}")
        number = int(value)
    elif isinstance(value, str):
        text = clean_text(value, options)
        if not _INT_RE.fullmatch(text):
            raise CellParseFailure(f"expected an integer, got {_describe(value)}")
        number = int(text)
    else:
        raise CellParseFailure(f"expected an integer, got {_describe(value)}")
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise CellParseFailure(f"integer out of 64-bit range: {_describe(value)}")
    return number


# ---------------------------------------------------------------------------
# double / number
# ---------------------------------------------------------------------------

def parse_double(value: Any, params: BaseModel, options: ReadOptions) -> float:
    if isinstance(value, bool):
        raise CellParseFailure(f"expected a double, got {_describe(value)}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = clean_text(value, options)
        if text in _SPECIAL_DOUBLES:
            return _SPECIAL_DOUBLES[text]
        decimal_mark = options.locale.decimal_mark
        if _double_re(decimal_mark).fullmatch(text):
            return float(text.replace(decimal_mark, "."))
    raise CellParseFailure(f"expected a double, got {_describe(value)}")


def parse_number(value: Any, params: BaseModel, options: ReadOptions) -> float:
    """Grab the first number in the cell, ignoring grouping marks and decoration."""
    if isinstance(value, bool):
        raise CellParseFailure(f"expected a number, got {_describe(value)}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        locale = options.locale
        text = clean_text(value, options).replace(locale.grouping_mark, "")
        match = _double_re(locale.decimal_mark).search(text)
        if match:
            return float(match.group().replace(locale.decimal_mark, "."))
    raise CellParseFailure(f"expected a number, got {_describe(value)}")


# ---------------------------------------------------------------------------
# text / factor
# ---------------------------------------------------------------------------

def _as_text(value: Any, options: ReadOptions) -> str:
    if isinstance(value, str):
        return clean_text(value, options)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def parse_text(value: Any, params: BaseModel, options: ReadOptions) -> str:
    return _as_text(value, options)


class FactorParams(BaseModel):
    """Parameters for the factor collector.

    ``levels=None`` takes the levels from the data, in order of appearance.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    levels: list[str] | None = None
    ordered: bool = False


def parse_factor(value: Any, params: FactorParams, options: ReadOptions) -> str:
    text = _as_text(value, options)
    if params.levels is not None and text not in params.levels:
        raise CellParseFailure(f"value {text!r} is not one of the factor levels")
    return text


def _factor_series(values: list, params: FactorParams) -> pd.Series:
    levels = params.levels
    if levels is None:
        levels = list(dict.fromkeys(v for v in values if v is not None))
    return pd.Series(pd.Categorical(values, categories=levels, ordered=params.ordered))


def scalar_collectors() -> list[Collector]:
    """The built-in scalar collectors, in guessing order."""
    return [
        Collector(
            tag="logical", parse=parse_logical, shorthand="l",
            dtype="boolean", guess_rank=10,
        ),
        Collector(
            tag="integer", parse=parse_integer, shorthand="i",
            dtype="Int64", guess_rank=20,
        ),
        Collector(
            tag="double", parse=parse_double, shorthand="d",
            dtype="Float64", guess_rank=30,
        ),
        Collector(tag="number", parse=parse_number, shorthand="n", dtype="Float64"),
        Collector(
            tag="text", parse=parse_text, shorthand="c",
            dtype="string", guess_rank=1000,
        ),
        Collector(
            tag="factor", parse=parse_factor, params_schema=FactorParams,
            shorthand="f", build_series=_factor_series,
        ),
    ]


__all__ = [
    "FactorParams",
    "parse_double",
    "parse_factor",
    "parse_integer",
    "parse_logical",
    "parse_number",
    "parse_text",
    "scalar_collectors",
]
