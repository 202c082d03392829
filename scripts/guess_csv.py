"""
Demo script: read a CSV as raw text, resolve its column spec, report problems.

Usage:
    uv run python scripts/guess_csv.py data.csv                 # guess everything
    uv run python scripts/guess_csv.py data.csv "?i_D"          # shorthand spec
    uv run python scripts/guess_csv.py data.csv --save spec.yaml

The file is read by pandas with every cell kept as a string, turned into a
RawGrid, and handed to colspec. The condensed spec is printed (and saved
with --save) so it can be edited and reused.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pandas as pd

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("guess_csv")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import colspec

    args = sys.argv[1:]
    if not args:
        log.error("usage: guess_csv.py FILE [SHORTHAND] [--save SPEC.yaml]")
        sys.exit(2)

    save_path: str | None = None
    if "--save" in args:
        idx = args.index("--save")
        save_path = args[idx + 1]
        del args[idx:idx + 2]

    input_path = Path(args[0])
    shorthand = args[1] if len(args) > 1 else None

    df = pd.read_csv(input_path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    grid = colspec.RawGrid.from_frame(df)

    result = colspec.read_grid(grid, col_types=shorthand)

    log.info("=" * 70)
    for col in result.spec.columns:
        log.info("  %-30s %s", col.identity.label, col.collector)
    log.info("=" * 70)

    condensed = colspec.condense(result.spec, shorthand=True)
    log.info("Condensed spec: %r", condensed)

    if result.has_problems:
        log.warning("%d problems:\n%s", len(result.diagnostics), result.problems().head(20))

    if save_path is not None:
        if isinstance(condensed, str):
            condensed = colspec.condense(result.spec)
        colspec.save_col_types(condensed, save_path)


if __name__ == "__main__":
    main()
