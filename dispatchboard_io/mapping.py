"""Spreadsheet row to dispatch record mapping."""

# Module responsibilities:
# - Hold the column-label -> record-attribute mapping (built in, or loaded from YAML).
# - Convert untyped spreadsheet rows into DispatchRecord values, defaulting
#   missing or unparseable cells instead of rejecting rows.

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable, List, Mapping

import pandas as pd
import yaml

from .schema import COUNT_FIELDS, STORAGE_KEYS, DispatchRecord
from .utils.log import get_logger

logger = get_logger("mapping")

Row = Mapping[str, object]

DEFAULT_COLUMNS: dict[str, str] = {
    "時間": "time",
    "接送種類": "type",
    "編號": "id",
    "服務車號": "car_number",
    "駕駛姓名": "driver_name",
    "駕駛電話": "driver_phone",
    "車款": "car_type",
    "航班編號": "flight_number",
    "航班時間": "flight_time",
    "航站": "terminal",
    "接送地址": "address",
    "貴賓姓名": "passenger_name",
    "行動電話": "passenger_phone",
    "客戶別": "customer_type",
    "專案名稱": "project_name",
    "搭乘人數": "passengers",
    "行李件數": "luggage",
}

TIME_OF_DAY_FIELDS: tuple[str, ...] = ("time", "flight_time")

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


class MappingError(RuntimeError):
    """Raised when mapping configuration is invalid."""


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_text(value: object, *, time_of_day: bool = False) -> str:
    """Render a raw cell as record text; missing cells become ``""``."""

    if _is_missing(value):
        return ""
    if isinstance(value, datetime):
        if time_of_day:
            return value.strftime("%H:%M")
        if value.time() == time.min:
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if as_float.is_integer():
            return str(int(as_float))
        return str(as_float)
    return str(value).strip()


def to_count(value: object) -> int:
    """Best-effort leading-integer parse; anything unusable or negative is 0."""

    if _is_missing(value) or isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Integral):
        return max(int(value), 0)
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if not math.isfinite(as_float):
            return 0
        return max(int(as_float), 0)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return 0
    return max(int(match.group(1)), 0)


@dataclass(frozen=True)
class ColumnMapping:
    """Column label -> DispatchRecord attribute mapping.

    Several labels may target the same attribute; the first label (in mapping
    order) holding a non-empty cell wins.
    """

    columns: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_COLUMNS))

    def __post_init__(self) -> None:
        unknown = sorted({attr for attr in self.columns.values() if attr not in STORAGE_KEYS})
        if unknown:
            raise MappingError(f"Unknown record attributes in column mapping: {', '.join(unknown)}")

    @classmethod
    def from_yaml(cls, path: Path) -> "ColumnMapping":
        """Load a column mapping from a YAML file with a ``columns`` table."""

        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
        if not isinstance(payload, dict):
            raise MappingError("Invalid column mapping YAML structure (expected mapping)")
        columns = payload.get("columns")
        if not isinstance(columns, dict) or not columns:
            raise MappingError("Column mapping YAML requires a non-empty 'columns' table")
        return cls(columns={str(k): str(v) for k, v in columns.items()})

    def map_row(self, row: Row) -> DispatchRecord:
        """Map one spreadsheet row to a pending DispatchRecord."""

        raw: dict[str, object] = {}
        for label, attr in self.columns.items():
            if attr in raw:
                continue
            value = row.get(label)
            if not _is_missing(value):
                raw[attr] = value

        values: dict[str, object] = {}
        for attr in STORAGE_KEYS:
            value = raw.get(attr)
            if attr in COUNT_FIELDS:
                values[attr] = to_count(value)
            else:
                values[attr] = to_text(value, time_of_day=attr in TIME_OF_DAY_FIELDS)
        return DispatchRecord(**values)

    def map_rows(self, rows: Iterable[Row]) -> List[DispatchRecord]:
        """Map rows in order; malformed rows degrade to mostly-default records."""

        records = [self.map_row(row) for row in rows]
        blank_ids = sum(1 for record in records if not record.id)
        logger.info("Mapped %d dispatch rows (%d without id)", len(records), blank_ids)
        return records


def map_rows(rows: Iterable[Row], mapping: ColumnMapping | None = None) -> List[DispatchRecord]:
    return (mapping or ColumnMapping()).map_rows(rows)
