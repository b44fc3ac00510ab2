"""Spreadsheet input helpers."""

# Module responsibilities:
# - Provide a thin wrapper around pandas readers returning rows of named cells.
# - Emit structured logs for traceability of each upload.

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from dispatchboard.core.errors import SpreadsheetError

from .utils.log import get_logger

logger = get_logger("excel_reader")

SheetType = Union[str, int]

# .xls workbooks go through xlrd, the rest through openpyxl; pandas picks by content
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}


def _read_frame(path: Path, sheet: SheetType) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, sheet_name=sheet, dtype=object)
    if suffix in CSV_SUFFIXES:
        return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    raise SpreadsheetError(f"Unsupported spreadsheet type: {path.name}")


def read_rows(path: Path, sheet: SheetType = 0) -> List[Dict[str, object]]:
    """Load rows of ``header label -> cell value`` from a spreadsheet.

    Args:
        path: Path to an Excel workbook or CSV file.
        sheet: Sheet name or index; defaults to the first sheet.

    Returns:
        One dict per non-blank row, in sheet order. Blank cells are ``None``.

    Raises:
        FileNotFoundError: When the file does not exist.
        SpreadsheetError: When the file type is unsupported or cannot be parsed.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dispatch spreadsheet not found: {path}")

    logger.info("Reading dispatch spreadsheet %s (sheet=%s)", path, sheet)

    try:
        df = _read_frame(path, sheet)
    except SpreadsheetError:
        raise
    except Exception as exc:  # noqa: BLE001 - each engine raises its own types on corrupt workbooks
        logger.error("Failed to read dispatch spreadsheet %s: %s", path, exc)
        raise SpreadsheetError(f"Cannot read {path.name}: {exc}") from exc

    if isinstance(df, dict):
        # pandas returns a dict when sheet_name is a list; this API expects a single sheet.
        raise SpreadsheetError("read_rows expects a single sheet; received multiple sheets")

    df = df.dropna(how="all")
    df.columns = [str(col).strip() for col in df.columns]
    df = df.astype(object).where(pd.notna(df), None)
    rows: List[Dict[str, object]] = []
    for record in df.to_dict(orient="records"):
        row = {
            str(label): (None if isinstance(value, str) and not value.strip() else value)
            for label, value in record.items()
        }
        if all(value is None for value in row.values()):
            continue
        rows.append(row)

    logger.info("Dispatch spreadsheet loaded: %d rows, columns=%s", len(rows), list(df.columns))
    return rows
