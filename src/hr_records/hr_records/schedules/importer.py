"""Schedule import sheets: .xlsx through openpyxl, .csv through the csv module.

Expected columns, first row is a header::

    Employee ID | Shift Type | Work Days | Start Time | End Time |
    Break Start | Break End | (unused) | End Date | Status | Notes
"""
from __future__ import annotations

import csv
import io
from datetime import date, datetime, time
from typing import Any, BinaryIO, List, Optional, Sequence
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..core.exceptions import DomainError
from ..uploads.storage import extension_of

COL_IDNO = 0
COL_SHIFT_TYPE = 1
COL_WORK_DAYS = 2
COL_START_TIME = 3
COL_END_TIME = 4
COL_BREAK_START = 5
COL_BREAK_END = 6
COL_END_DATE = 8
COL_STATUS = 9
COL_NOTES = 10

CELL_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M:%S %p", "%I:%M%p")
CELL_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%m/%d/%Y")


def read_rows(filename: str, stream: BinaryIO) -> List[List[Any]]:
    """Every row of the first (active) sheet, header included."""
    data = stream.read()
    try:
        if extension_of(filename) == "csv":
            return [list(r) for r in csv.reader(io.StringIO(data.decode("utf-8-sig")))]
        book = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            return [list(r) for r in book.active.iter_rows(values_only=True)]
        finally:
            book.close()
    except (InvalidFileException, BadZipFile, KeyError, ValueError, csv.Error) as e:
        raise DomainError(f"Failed to read file: {e}") from e


def cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    # numeric ids come back from excel as floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_blank(row: Sequence[Any]) -> bool:
    return all(cell_text(v) == "" for v in row)


def cell_time(value: Any) -> Optional[time]:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value < 1:
        # excel stores a bare time as a fraction of a day
        seconds = min(round(value * 86400), 86399)
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    text = cell_text(value).upper()
    for fmt in CELL_TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def cell_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = cell_text(value)
    for fmt in CELL_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
