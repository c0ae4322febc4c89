"""CLI helpers for engine construction."""

from __future__ import annotations

import os

from recordmap.config import RecordMapConfig
from recordmap.engine import Engine


def _config_from_env() -> RecordMapConfig:
    """Build engine config from CLI environment defaults."""
    config = RecordMapConfig(dialect=os.getenv("RECORDMAP_DIALECT") or None)
    depth = os.getenv("RECORDMAP_MAX_RELATION_DEPTH")
    if depth:
        config.max_relation_depth = int(depth)
    return config


def open_engine() -> Engine:
    """Open an engine over the SQLite database selected by the global --db option."""
    from recordmap.cli import state

    return Engine.connect(state.db, config=_config_from_env())
