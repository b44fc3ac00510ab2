"""
RESPONSIBILITIES
- Resolve and create the ~/DispatchBoard directory scaffold used for persistence.
- Provide helpers for locating durable slot files.
PROCESS OVERVIEW
1. resolve_root() expands user input, then DISPATCHBOARD_ROOT, then falls back to ~/DispatchBoard.
2. ensure_structure() materializes store/logs directories.
3. slot_file_path() returns the canonical JSON file for a named slot.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

ROOT_ENV = "DISPATCHBOARD_ROOT"
_DEFAULT_SUBDIRS: tuple[str, ...] = ("store", "logs")


def resolve_root(root: str | os.PathLike[str] | None = None) -> Path:
    """Return the persistence root, defaulting to ~/DispatchBoard."""

    if root is None:
        env = os.getenv(ROOT_ENV)
        base = Path(env) if env else Path.home() / "DispatchBoard"
    else:
        base = Path(root)
    return base.expanduser().resolve()


def ensure_structure(root: str | os.PathLike[str] | None = None, *, subdirs: Iterable[str] | None = None) -> dict[str, Path]:
    """Ensure persistence directories exist and return a mapping."""

    base = resolve_root(root)
    resolved: dict[str, Path] = {"base": base}
    requested = tuple(subdirs) if subdirs is not None else _DEFAULT_SUBDIRS
    base.mkdir(parents=True, exist_ok=True)
    for name in requested:
        target = base / name
        target.mkdir(parents=True, exist_ok=True)
        resolved[name] = target
    return resolved


def slot_file_path(slot_name: str, root: str | os.PathLike[str] | None = None) -> Path:
    """Return the absolute path of the JSON file backing *slot_name*."""

    directories = ensure_structure(root)
    return directories["store"] / f"{slot_name}.json"
