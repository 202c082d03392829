"""
Custom exception hierarchy for colspec.

Two error channels are kept apart:

- **Structural errors** (this module): a malformed column specification or a
  spec that does not fit the data's shape. They abort resolution before any
  cell is parsed and are always raised.
- **Cell failures** (``colspec.collectors.base.CellParseFailure``): one raw
  value that does not conform to its column's type. These are caught by the
  parsing engine and recorded as ``ParseDiagnostic`` entries, never raised to
  the caller.

``CellParseFailure`` is not a ``ColSpecError``: catching ``ColSpecError``
never catches a data problem.
"""

from __future__ import annotations


class ColSpecError(Exception):
    """Base exception for all structural colspec errors."""


class ConfigurationError(ColSpecError):
    """Raised when a user specification or registry setup is malformed.

    This can happen if:
    - A shorthand string contains a character with no registered collector.
    - A collector tag is unknown, or a parameter is unknown / invalid.
    - A shorthand code or tag is registered twice in one registry.
    - Two explicit entries resolve to the same column position.
    """


class ShapeMismatch(ColSpecError):
    """Raised when a shorthand string or positional spec has the wrong length.

    Attributes:
        expected: The number of columns in the data.
        actual: The number of entries the specification supplied.
    """

    def __init__(self, expected: int, actual: int, what: str = "specification") -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Column {what} has {actual} entries but the data has "
            f"{expected} columns (expected length {expected}, got {actual})."
        )


class UnresolvedColumnError(ColSpecError):
    """Raised when a column reference matches zero or several columns.

    Attributes:
        reference: The name or position the user wrote.
        matches: Positions the reference matched (empty for no match).
    """

    def __init__(self, reference: str | int, matches: list[int], message: str) -> None:
        self.reference = reference
        self.matches = list(matches)
        super().__init__(message)
