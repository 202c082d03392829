"""
Collector registry for colspec.

Maps a collector tag to its ``Collector`` record and a shorthand code to
its tag. The built-ins are:

==============  =====  ================================================
tag             code   notes
==============  =====  ================================================
logical         l      guessable
integer         i      guessable
double          d      guessable
number          n      forgiving numeric (grouping marks, decoration)
text            c      guessable; always matches
factor          f      params: levels, ordered
date            D      param: format; guessable
datetime        T      param: format; guessable
time            t      param: format; guessable
list            L      per-cell guessing, one tagged value per cell
cell-detail     C      raw cell record passed through
skip            _ -    column excluded from output
guess           ?      replaced by the Type Guesser at resolution
==============  =====  ================================================

New types are added by registering one more ``Collector``; the resolver
and engine only talk to records. A registry is read-only while parsing and
can be shared across concurrent parse calls.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from colspec.collectors.base import Collector
from colspec.collectors.dates import date_collectors
from colspec.collectors.scalars import scalar_collectors
from colspec.exceptions import ConfigurationError
from colspec.spec import CELL_DETAIL, GUESS, LIST, SKIP

logger = logging.getLogger(__name__)


def _structural_collectors() -> list[Collector]:
    """Collectors that shape the output instead of converting values."""
    return [
        Collector(tag=LIST, shorthand="L", per_cell_guess=True),
        Collector(tag=CELL_DETAIL, shorthand="C", passthrough=True),
        Collector(tag=SKIP, shorthand="_", aliases=("-",), emits_output=False),
        Collector(tag=GUESS, shorthand="?", emits_output=False),
    ]


class CollectorRegistry:
    """Tag -> Collector and code -> tag lookup.

    Invariant: every shorthand code (primary or alias) belongs to exactly
    one tag.
    """

    def __init__(self, collectors: Iterable[Collector] = ()) -> None:
        self._by_tag: dict[str, Collector] = {}
        self._by_code: dict[str, str] = {}
        for collector in collectors:
            self.register(collector)

    # -- Mutation -----------------------------------------------------------

    def register(self, collector: Collector, replace: bool = False) -> None:
        """Add a collector.

        Args:
            collector: The record to add.
            replace: Allow overwriting an existing collector with the same tag.

        Raises:
            ConfigurationError: If the tag exists and *replace* is False, if a
                code is not a single character, or if a code already belongs
                to another tag.
        """
        existing = self._by_tag.get(collector.tag)
        if existing is not None and not replace:
            raise ConfigurationError(
                f"Collector '{collector.tag}' is already registered "
                "(pass replace=True to overwrite)."
            )
        for code in collector.codes:
            if len(code) != 1:
                raise ConfigurationError(
                    f"Shorthand code {code!r} for '{collector.tag}' must be a single character."
                )
            owner = self._by_code.get(code)
            if owner is not None and owner != collector.tag:
                raise ConfigurationError(
                    f"Shorthand code {code!r} is already used by collector '{owner}'."
                )
        if existing is not None:
            for code in existing.codes:
                self._by_code.pop(code, None)
        self._by_tag[collector.tag] = collector
        for code in collector.codes:
            self._by_code[code] = collector.tag
        logger.debug("Registered collector '%s' (codes=%s)", collector.tag, collector.codes)

    # -- Lookup -------------------------------------------------------------

    def get(self, tag: str) -> Collector:
        """Return the collector for *tag*.

        Raises:
            ConfigurationError: If the tag is unknown.
        """
        try:
            return self._by_tag[tag]
        except KeyError:
            raise ConfigurationError(
                f"Unknown collector tag {tag!r}. Registered: {sorted(self._by_tag)}"
            ) from None

    def tag_for_code(self, code: str) -> str:
        """Return the tag for a shorthand *code*.

        Raises:
            ConfigurationError: If the code is unknown.
        """
        try:
            return self._by_code[code]
        except KeyError:
            raise ConfigurationError(
                f"Unknown shorthand code {code!r}. Registered codes: "
                f"{''.join(sorted(self._by_code))}"
            ) from None

    def lookup(self, tag_or_code: str) -> Collector:
        """Resolve a tag, or failing that a single-character code."""
        if tag_or_code in self._by_tag:
            return self._by_tag[tag_or_code]
        if len(tag_or_code) == 1 and tag_or_code in self._by_code:
            return self._by_tag[self._by_code[tag_or_code]]
        raise ConfigurationError(
            f"Unknown collector {tag_or_code!r}: not a registered tag or shorthand code."
        )

    def guessable(self) -> list[Collector]:
        """Collectors taking part in guessing, most specific first."""
        ranked = [c for c in self._by_tag.values() if c.guess_rank is not None]
        return sorted(ranked, key=lambda c: c.guess_rank)

    @property
    def codes(self) -> dict[str, str]:
        """Code -> tag mapping (copy)."""
        return dict(self._by_code)

    def copy(self) -> CollectorRegistry:
        """An independent registry with the same collectors."""
        clone = CollectorRegistry()
        clone._by_tag = dict(self._by_tag)
        clone._by_code = dict(self._by_code)
        return clone

    def __contains__(self, tag: object) -> bool:
        return tag in self._by_tag

    def __iter__(self) -> Iterator[Collector]:
        return iter(self._by_tag.values())

    def __len__(self) -> int:
        return len(self._by_tag)


def default_registry() -> CollectorRegistry:
    """A fresh registry holding the built-in collectors."""
    return CollectorRegistry(
        scalar_collectors() + date_collectors() + _structural_collectors()
    )
