"""Model loader: import Python modules and discover registered Record types."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

from recordmap.types import Record


def load_records(
    models: str | None = None,
    models_path: str | None = None,
) -> dict[str, type[Record]]:
    """Load Record classes that declare a table from a Python module.

    Args:
        models: Dotted Python import path (e.g. 'myapp.models')
        models_path: Filesystem path to a Python file

    Returns:
        Record types keyed by class name
    """
    if models_path:
        path = Path(models_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Models path not found: {models_path}")
        # Add parent to sys.path so import works
        parent = str(path.parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)
        module = importlib.import_module(path.stem)
    elif models:
        module = importlib.import_module(models)
    else:
        raise ValueError("One of --models or --models-path is required")

    record_types: dict[str, type[Record]] = {}
    for attr_name in dir(module):
        obj = getattr(module, attr_name)
        if not isinstance(obj, type) or not issubclass(obj, Record) or obj is Record:
            continue
        if "__record__" in obj.__dict__:
            record_types[obj.__name__] = obj

    return record_types
