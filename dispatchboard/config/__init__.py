"""Configuration helpers for the dispatch board runtime.

Settings come from built-in defaults, an optional YAML file and
``DISPATCHBOARD_*`` environment variables (a local ``.env`` file is honoured),
later sources overriding earlier ones.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dispatchboard.core.errors import ConfigError
from dispatchboard_io.mapping import ColumnMapping, MappingError
from dispatchboard_io.schema import utcnow
from dispatchboard_persist.stores.dispatch_store import DispatchStore
from dispatchboard_persist.stores.json_slot import DEFAULT_SLOT_NAME, JsonFileSlot
from dispatchboard_persist.utils.log import get_logger
from dispatchboard_persist.utils.paths import ROOT_ENV, resolve_root


load_dotenv(override=False)

CONFIG_ENV = "DISPATCHBOARD_CONFIG"

# environment variable -> settings field
ENV_OVERRIDES: dict[str, str] = {
    ROOT_ENV: "data_root",
    "DISPATCHBOARD_SLOT": "slot_name",
    "DISPATCHBOARD_POLL_MS": "poll_interval_ms",
    "DISPATCHBOARD_APPROACHING_SECONDS": "approaching_seconds",
    "DISPATCHBOARD_COLUMNS_FILE": "columns_file",
}


class BoardSettings(BaseModel):
    """Resolved runtime settings."""

    model_config = ConfigDict(extra="forbid")

    data_root: Path | None = None
    slot_name: str = Field(default=DEFAULT_SLOT_NAME, min_length=1)
    poll_interval_ms: int = Field(default=1000, gt=0)
    approaching_seconds: int = Field(default=45 * 60, ge=0)
    bell_interval_ms: int = Field(default=1000, gt=0)
    columns_file: Path | None = None

    @property
    def root(self) -> Path:
        return resolve_root(self.data_root)

    def column_mapping(self) -> ColumnMapping:
        if self.columns_file is None:
            return ColumnMapping()
        path = Path(self.columns_file)
        if not path.exists():
            raise ConfigError(f"欄位對應檔案未找到: {path}")
        try:
            return ColumnMapping.from_yaml(path)
        except (MappingError, yaml.YAMLError) as exc:
            raise ConfigError(f"欄位對應檔案格式錯誤: {path}: {exc}") from exc

    def open_store(self, clock: Callable[[], datetime] = utcnow) -> DispatchStore:
        """Build a store on the configured slot and restore its last snapshot."""

        slot = JsonFileSlot.for_name(self.slot_name, self.root)
        store = DispatchStore(
            slot,
            mapping=self.column_mapping(),
            clock=clock,
            logger=get_logger("dispatch_store", self.root),
        )
        store.restore()
        return store


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"設定檔未找到: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"設定檔無法解析: {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("設定檔必須是字典結構")
    return data


def load_settings(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> BoardSettings:
    """Load settings from defaults, an optional YAML file and the environment."""

    environ = os.environ if env is None else env
    config_path = Path(path) if path else None
    if config_path is None and environ.get(CONFIG_ENV):
        config_path = Path(environ[CONFIG_ENV])

    data: Dict[str, Any] = {}
    if config_path is not None:
        data = _load_yaml(config_path.expanduser())
        columns_file = data.get("columns_file")
        if columns_file and not Path(columns_file).is_absolute():
            data["columns_file"] = str(config_path.expanduser().parent / columns_file)

    for env_key, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_key)
        if value:
            data[field_name] = value

    try:
        return BoardSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"設定值無效: {exc}") from exc
