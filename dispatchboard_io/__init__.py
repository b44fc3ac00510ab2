"""`dispatchboard_io` top-level package exports spreadsheet reading and row mapping helpers."""

# Module responsibilities:
# - Re-export the reader, the row mapper and the record schemas so consumers have a stable API surface.

from __future__ import annotations

from .excel_reader import read_rows
from .mapping import DEFAULT_COLUMNS, ColumnMapping, MappingError, map_rows
from .schema import (
    STATUS_CONFIRMED,
    STATUS_OVERDUE,
    STATUS_PENDING,
    DispatchRecord,
    DispatchState,
)

__all__ = [
    "read_rows",
    "DEFAULT_COLUMNS",
    "ColumnMapping",
    "MappingError",
    "map_rows",
    "DispatchRecord",
    "DispatchState",
    "STATUS_PENDING",
    "STATUS_CONFIRMED",
    "STATUS_OVERDUE",
]

__version__ = "0.1.0"
