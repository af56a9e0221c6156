"""Filesystem helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path):
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_json(path: Path, payload) -> None:
    ensure_dir(path.parent)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
        f.write("\n")


def write_record_json(path: Path, record: Mapping[str, Any]) -> None:
    """Write one record file, keeping the upstream field order."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(dict(record), f, ensure_ascii=False, indent=4)


def read_json(path: Path):
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def remove_tree(path: Path) -> bool:
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        for child in path.iterdir():
            remove_tree(child)
        path.rmdir()
        return True
    return False
