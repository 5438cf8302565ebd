#!/usr/bin/env python3
"""Rewrite a map document in canonical form.

Loads a map document (including older ones that stored raw vertex data),
rebuilds every obstacle from its canonical fields and writes the result
back out with only ``type``/``anchorPoint``/``rotationAngle``/``anchor``
per obstacle. Entries that cannot be decoded are reported and dropped.

Usage (from the repo root):
    python scripts/normalize_map.py old_map.json                  # print to stdout
    python scripts/normalize_map.py old_map.json -o maps/         # maps/<mapName>.json
    python scripts/normalize_map.py old_map.json -o new.json --cell-size 20
    python scripts/normalize_map.py old_map.json --grid grid.json --name arena
"""

import argparse
import json
import os
import sys
from pathlib import Path

# Add repo root to path so we can import engine
SCRIPT_DIR = Path(__file__).resolve().parent
REPO_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(REPO_DIR))

from engine.codec import load_store, to_document  # noqa: E402
from engine.map_io import (  # noqa: E402
    default_map_filename,
    load_grid_config,
    load_map,
    save_map_json,
)
from engine.types import GridConfig  # noqa: E402


def _grid_from_args(args) -> GridConfig:
    if args.grid:
        return load_grid_config(args.grid)
    overrides = {}
    if args.cell_size is not None:
        overrides["cell_size"] = args.cell_size
    if args.cols is not None:
        overrides["cols"] = args.cols
    if args.rows is not None:
        overrides["rows"] = args.rows
    return GridConfig.from_dict(overrides)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("input", type=Path, help="map document (.json)")
    parser.add_argument(
        "-o",
        "--output",
        help=(
            "output file, or directory to write <mapName>.json into "
            "(an existing directory, or any path ending in a separator)"
        ),
    )
    parser.add_argument("--name", help="override the map name")
    parser.add_argument("--grid", type=Path, help="grid config JSON file")
    parser.add_argument("--cell-size", type=float)
    parser.add_argument("--cols", type=int)
    parser.add_argument("--rows", type=int)
    args = parser.parse_args(argv)

    if args.grid and (
        args.cell_size is not None
        or args.cols is not None
        or args.rows is not None
    ):
        parser.error("--grid excludes --cell-size/--cols/--rows")

    try:
        grid = _grid_from_args(args)
        doc = load_map(args.input)
        store, loaded = load_store(doc, grid)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for i in loaded.skipped:
        print(f"⚠ Skipped obstacles[{i}]: not decodable", file=sys.stderr)

    name = args.name or loaded.map_name or args.input.stem
    out = to_document(store, name, loaded.created_at)

    if args.output is None:
        json.dump(out, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        path = Path(args.output)
        if args.output.endswith((os.sep, "/")) or path.is_dir():
            path = path / default_map_filename(out["mapName"])
        save_map_json(out, path)
        print(
            f"✓ Wrote {len(store)} obstacles to {path}",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
