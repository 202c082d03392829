"""
Shared test fixtures for colspec tests.

Grids are small and built in memory; the people grid mirrors the running
example used throughout the docs (Name / Age / Has kids).
"""

from __future__ import annotations

import pytest

from colspec.config import ReadOptions
from colspec.grid import RawGrid


# ---------------------------------------------------------------------------
# Grid fixtures
# ---------------------------------------------------------------------------

PEOPLE_HEADER = ["Name", "Age", "Has kids"]
PEOPLE_ROWS = [
    ["Ann", "34", "TRUE"],
    ["Bo", "7", "FALSE"],
    ["Cy", "", "NA"],
    ["Di", "51", "TRUE"],
]


@pytest.fixture
def people_grid() -> RawGrid:
    return RawGrid(rows=[list(r) for r in PEOPLE_ROWS], header=list(PEOPLE_HEADER))


@pytest.fixture
def headerless_grid() -> RawGrid:
    return RawGrid(rows=[["a", "1", "2.5"], ["b", "2", "3.0"]])


@pytest.fixture
def options() -> ReadOptions:
    return ReadOptions()


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (end-to-end through the public API)",
    )
