"""Load and save map documents and grid configs as JSON files.

Map documents are written pretty-printed (2-space indent, trailing newline)
so saved maps diff cleanly. Decoding a document into obstacles is the
codec's job (``codec.py``); this module only moves dicts to and from disk.

Used by ``scripts/normalize_map.py``.
"""

from __future__ import annotations

import json
from pathlib import Path

from .types import GridConfig


def default_map_filename(map_name: str) -> str:
    return f"{map_name}.json"


def _read_json(path: Path) -> object:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: not valid JSON ({e})") from e


def load_map_json(path: Path) -> dict:
    """Load a map document dict from a JSON file.

    Raises ValueError if the file is not JSON or its top level is not an
    object. Field validation happens in ``codec.from_document``.
    """
    data = _read_json(Path(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: map document must be a JSON object")
    return data


def load_map(path: Path) -> dict:
    """Load a map document, dispatching by extension.

    Only ``.json`` is supported; raises ValueError for anything else.
    """
    path = Path(path)
    if path.suffix.lower() == ".json":
        return load_map_json(path)
    raise ValueError(f"Unsupported file extension: {path}")


def save_map_json(doc: dict, path: Path) -> None:
    """Write a map document dict to a JSON file.

    Creates parent directories if they don't exist.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2, ensure_ascii=False)
        f.write("\n")


def load_grid_config(path: Path) -> GridConfig:
    """Load a ``GridConfig`` from JSON (``cell_size``, ``cols``, ``rows``)."""
    data = _read_json(Path(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: grid config must be a JSON object")
    return GridConfig.from_dict(data)
