"""Read the first worksheet of an Excel workbook into rows of display text.

Every cell is rendered the way a user would read it in the sheet, so composite
values such as `50 €` or `12 %` reach the normalizer as text it can split. The
header row is made safe for the normalizer here: blank header cells get a
positional `Column<N>` name and duplicates are suffixed `_1`, `_2`, ...
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException


# Shared with the currency splitting rule of the normalizer.
CURRENCY_SYMBOLS = "$€£¥₹₩¢"
DECIMAL_PLACES_RE = re.compile(r"\.(0+)")


class IngestionError(Exception):
    """Raised when a workbook cannot be read into rows."""


def _decimal_places(number_format: str) -> int:
    match = DECIMAL_PLACES_RE.search(number_format)
    return len(match.group(1)) if match else 0


def _format_number(value: float, number_format: str, currency_symbols: str = CURRENCY_SYMBOLS) -> str:
    # Only the positive section of a multi-section format matters for display text.
    section = number_format.split(";")[0]
    places = _decimal_places(section)
    symbol = next((s for s in section if s in currency_symbols), None)
    if symbol is not None:
        digits = re.search(r"[0#]", section)
        amount = f"{value:.{places}f}"
        if digits is not None and section.index(symbol) < digits.start():
            return f"{symbol}{amount}"
        return f"{amount} {symbol}"
    if "%" in section:
        return f"{value * 100:.{places}f}%"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_cell(
    value: Any, number_format: Optional[str] = None, currency_symbols: str = CURRENCY_SYMBOLS
) -> Optional[str]:
    """Render a raw cell value as trimmed display text; blank cells become None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0):
            return value.date().isoformat()
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return _format_number(value, number_format or "General", currency_symbols)
    text = str(value).strip()
    return text or None


def read_header(cells: Sequence[Any]) -> List[str]:
    """Column names for a header row: trimmed text, `Column<N>` for blanks, suffixed duplicates."""
    texts = [format_cell(cell) for cell in cells]
    while texts and texts[-1] is None:
        texts.pop()

    names: List[str] = []
    for index, text in enumerate(texts, start=1):
        name = text if text else f"Column{index}"
        candidate = name
        counter = 1
        while candidate in names:
            candidate = f"{name}_{counter}"
            counter += 1
        names.append(candidate)
    return names


def read_excel_rows(path: str | Path, currency_symbols: str = CURRENCY_SYMBOLS) -> List[Dict[str, Any]]:
    """Rows of the first worksheet, keyed by header name, blank rows skipped."""
    path = Path(path)
    if not path.exists():
        raise IngestionError(f"Workbook not found: {path}")
    try:
        workbook = load_workbook(filename=path, data_only=True, read_only=True)
    except (InvalidFileException, BadZipFile, OSError, KeyError) as exc:
        raise IngestionError(f"Could not open workbook {path}: {exc}") from exc

    try:
        if not workbook.worksheets:
            raise IngestionError(f"Workbook {path} contains no worksheets")
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows()
        header = next(rows, None)
        columns = read_header([cell.value for cell in header]) if header else []
        if not columns:
            raise IngestionError(f"No header row found in the first sheet of {path}")

        data: List[Dict[str, Any]] = []
        for cells in rows:
            values = [
                format_cell(cell.value, getattr(cell, "number_format", None), currency_symbols) for cell in cells
            ]
            if all(v is None for v in values):
                continue
            data.append(
                {column: values[idx] if idx < len(values) else None for idx, column in enumerate(columns)}
            )
        return data
    finally:
        workbook.close()
