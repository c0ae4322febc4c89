"""Output helpers for the CLI: aligned text tables, JSON, errors on stderr."""

from __future__ import annotations

import json
import sys
from typing import Any, Sequence


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def print_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    """Print rows under a header line, each column padded to its widest cell."""
    cells = [[str(v) for v in row] for row in rows]
    widths = [max(len(cell) for cell in column) for column in zip(headers, *cells)]
    for line in [list(headers), ["-" * w for w in widths], *cells]:
        print("  ".join(cell.ljust(w) for cell, w in zip(line, widths)).rstrip())


def print_error(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)
