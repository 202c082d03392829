"""
Date-like collectors for colspec: date, datetime, time.

Each takes one optional parameter, ``format`` (a ``strptime`` pattern).

Format sniffing works like layout detection: candidate patterns from the
Locale are tried in order and the first one under which **every** sampled
value parses wins. The candidate lists put ISO layouts first, so a sample
such as ``"01/02/2020"`` that fits both ``%m/%d/%Y`` and ``%d/%m/%Y``
resolves to whichever the Locale lists first.

An explicit date/datetime/time rule without a format gets one at
resolution time (``fill_params``): the sniffed pattern if the sample
matches one, else the Locale's fallback (``date_format``,
``datetime_format``, ``time_format``). With no sample at all (a header-only
grid) the rule is left as written. Datetimes with an offset are converted
to naive UTC so a column holds one kind of value. Output Series use a
microsecond unit so years 1-9999 fit.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Any, Callable

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict

from colspec.collectors.base import CellParseFailure, Collector, clean_text

if TYPE_CHECKING:
    from colspec.config import ReadOptions


class FormatParams(BaseModel):
    """Parameters shared by the date-like collectors."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: str | None = None


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _strptime(value: str, fmt: str, options: ReadOptions, what: str) -> datetime:
    text = clean_text(value, options)
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        raise CellParseFailure(f"expected {what} in format {fmt!r}, got {value!r}") from None


# ---------------------------------------------------------------------------
# Parse functions
# ---------------------------------------------------------------------------

def parse_date(value: Any, params: FormatParams, options: ReadOptions) -> date:
    if isinstance(value, datetime):
        if value.time() != time(0, 0):
            raise CellParseFailure(f"expected a date, got a datetime with a time part: {value!r}")
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        fmt = params.format or options.locale.date_format
        return _strptime(value, fmt, options, "a date").date()
    raise CellParseFailure(f"expected a date, got {value!r}")


def parse_datetime(value: Any, params: FormatParams, options: ReadOptions) -> datetime:
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time(0, 0))
    if isinstance(value, str):
        fmt = params.format or options.locale.datetime_format
        if fmt is not None:
            return _to_naive_utc(_strptime(value, fmt, options, "a datetime"))
        try:
            return _to_naive_utc(datetime.fromisoformat(clean_text(value, options)))
        except ValueError:
            raise CellParseFailure(f"expected an ISO 8601 datetime, got {value!r}") from None
    raise CellParseFailure(f"expected a datetime, got {value!r}")


def parse_time(value: Any, params: FormatParams, options: ReadOptions) -> time:
    if isinstance(value, datetime):
        raise CellParseFailure(f"expected a time of day, got a datetime: {value!r}")
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        fmt = params.format or options.locale.time_format
        return _strptime(value, fmt, options, "a time").time()
    raise CellParseFailure(f"expected a time of day, got {value!r}")


# ---------------------------------------------------------------------------
# Sniffing
# ---------------------------------------------------------------------------

ParseFn = Callable[[Any, FormatParams, "ReadOptions"], Any]


def sniff_format(
    parse: ParseFn,
    candidates: list[str],
    values: list,
    options: ReadOptions,
) -> dict[str, Any] | None:
    """Return ``{"format": fmt}`` for the first pattern that parses every value.

    If no value is a string (a rich source with native dates), no pattern is
    needed and ``{}`` is returned as long as the native values all parse.
    Returns ``None`` when nothing fits.
    """
    if not any(isinstance(v, str) for v in values):
        try:
            for v in values:
                parse(v, FormatParams(), options)
        except ValueError:
            return None
        return {}
    for fmt in candidates:
        params = FormatParams(format=fmt)
        try:
            for v in values:
                parse(v, params, options)
        except ValueError:
            continue
        return {"format": fmt}
    return None


def _sniffer(parse: ParseFn, candidates_attr: str):
    def sniff(values: list, options: ReadOptions) -> dict[str, Any] | None:
        candidates = getattr(options.locale, candidates_attr)
        return sniff_format(parse, candidates, values, options)
    return sniff


def _filler(parse: ParseFn, candidates_attr: str, fallback_attr: str):
    def fill(params: dict[str, Any], values: list, options: ReadOptions) -> dict[str, Any]:
        if params.get("format"):
            return params
        if not values:
            return params
        candidates = getattr(options.locale, candidates_attr)
        sniffed = sniff_format(parse, candidates, values, options)
        if sniffed is not None:
            return {**params, **sniffed}
        fallback = getattr(options.locale, fallback_attr)
        if fallback is None:
            return params
        return {**params, "format": fallback}
    return fill


def _datetime_series(values: list, params: FormatParams) -> pd.Series:
    # Microsecond unit covers years 1-9999; the nanosecond default stops at 2262.
    stamps = np.array(
        [np.datetime64("NaT", "us") if v is None else np.datetime64(v, "us") for v in values],
        dtype="datetime64[us]",
    )
    return pd.Series(stamps)


def date_collectors() -> list[Collector]:
    """The built-in date-like collectors, in guessing order."""
    return [
        Collector(
            tag="date", parse=parse_date, params_schema=FormatParams, shorthand="D",
            guess_rank=40, build_series=_datetime_series,
            sniff=_sniffer(parse_date, "date_formats"),
            fill_params=_filler(parse_date, "date_formats", "date_format"),
        ),
        Collector(
            tag="datetime", parse=parse_datetime, params_schema=FormatParams, shorthand="T",
            guess_rank=50, build_series=_datetime_series,
            sniff=_sniffer(parse_datetime, "datetime_formats"),
            fill_params=_filler(parse_datetime, "datetime_formats", "datetime_format"),
        ),
        Collector(
            tag="time", parse=parse_time, params_schema=FormatParams, shorthand="t",
            guess_rank=60,
            sniff=_sniffer(parse_time, "time_formats"),
            fill_params=_filler(parse_time, "time_formats", "time_format"),
        ),
    ]
