"""
RESPONSIBILITIES
- File-backed durable slot keeping one JSON document under <root>/store.
- Atomic replace on write via a temporary file swap.
PROCESS OVERVIEW
1. JsonFileSlot.for_name() resolves <root>/store/<name>.json.
2. read() returns None until the first write.
3. write() writes <name>.json.tmp then os.replace()s it over the target.
"""

from __future__ import annotations

import os
from pathlib import Path

from dispatchboard_persist.stores.base_store import StorePersistError
from dispatchboard_persist.utils.paths import slot_file_path

DEFAULT_SLOT_NAME = "dispatchData"


def _tmp_path(path: Path) -> Path:
    return path.with_name(path.name + ".tmp")


class JsonFileSlot:
    """Durable slot stored as a UTF-8 JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @classmethod
    def for_name(cls, name: str = DEFAULT_SLOT_NAME, root: Path | str | None = None) -> "JsonFileSlot":
        return cls(slot_file_path(name, root))

    @property
    def location(self) -> Path:
        return self.path

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorePersistError(f"Cannot read slot {self.path}: {exc}") from exc

    def write(self, payload: str) -> None:
        tmp_path = _tmp_path(self.path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorePersistError(f"Cannot write slot {self.path}: {exc}") from exc
