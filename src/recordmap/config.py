"""Configuration for the recordmap engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RecordMapConfig:
    """Configuration for an Engine."""

    dialect: str | None = None
    max_relation_depth: int = 16
