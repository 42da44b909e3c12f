"""
Positional workbook reader and the cell coercion helpers every parser uses.

Workbooks are decoded with pandas (openpyxl for ``.xlsx``, xlrd for legacy
``.xls``) with ``header=None``: no row is trusted as a header.  Each row comes
back as a ``{column letter: raw value}`` mapping with blank cells left out.
"""

from __future__ import annotations

import io
import logging
import numbers
import re
import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.utils.datetime import from_excel

from painel.services.imports.parsers.layouts import ColumnLayout
from painel.services.imports.records import ErrorKind, ErrorRecord

logger = logging.getLogger(__name__)

Row = dict[str, Any]

MAX_TEXT_LENGTH = 100


class WorkbookReadError(Exception):
    """The workbook bytes could not be decoded at all."""

    def __init__(self, error: ErrorRecord):
        super().__init__(error.description)
        self.error = error


# ═══════════════════════════════════════════════════════════════
# Reader
# ═══════════════════════════════════════════════════════════════

def read_workbook(raw_bytes: bytes, file_label: str) -> list[Row]:
    """
    Decode the first sheet of a workbook into positional rows.

    Row ``i`` of the returned list is sheet row ``i + 1``.  Raises
    ``WorkbookReadError`` (carrying a file-level error with no line number)
    when the bytes are not a readable workbook.
    """
    try:
        frame = pd.read_excel(
            io.BytesIO(raw_bytes), sheet_name=0, header=None, dtype=object,
        )
    except Exception as exc:
        raise WorkbookReadError(ErrorRecord(
            kind=ErrorKind.PARSE,
            file=file_label,
            description=f"Could not read workbook: {exc}",
        )) from exc

    letters = [get_column_letter(i + 1) for i in range(frame.shape[1])]
    rows: list[Row] = []
    for values in frame.itertuples(index=False, name=None):
        rows.append({
            letter: value
            for letter, value in zip(letters, values)
            if not _is_missing(value)
        })
    return rows


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_blank_row(row: Row) -> bool:
    return all(cell_text(value) is None for value in row.values())


# ═══════════════════════════════════════════════════════════════
# Cell coercion
# ═══════════════════════════════════════════════════════════════

_INTEGER_RE = re.compile(r"^[+-]?\d+(?:[.,]0+)?$")
_BR_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")


def cell_text(value: Any) -> str | None:
    """Trimmed, whitespace-collapsed text, or None when blank."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        # references typed as numbers come back as 1234.0 from .xls files
        value = int(value)
    text = " ".join(str(value).split())
    return text[:MAX_TEXT_LENGTH] or None


def cell_integer(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        number = float(value)
        if number != number or number in (float("inf"), float("-inf")):
            return None
        return int(number // 1)
    if isinstance(value, str):
        text = value.strip()
        if not _INTEGER_RE.match(text):
            return None
        return int(re.split(r"[.,]", text)[0])
    return None


def cell_decimal(value: Any) -> Decimal | None:
    """
    Parse a monetary cell.

    Numbers go through ``str`` so binary floats keep their printed digits.
    Strings may carry ``R$`` and use either Brazilian (``1.234,56``) or
    plain (``1234.56``) separators.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, numbers.Real):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.replace("R$", "").replace(" ", "").strip()
        if not text:
            return None
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    return result if result.is_finite() else None


def cell_date(value: Any) -> date | None:
    """Calendar date from a date cell, an Excel serial, or ISO / DD/MM/YYYY text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real):
        if value <= 0:
            return None
        try:
            converted = from_excel(value)
        except (OverflowError, ValueError, TypeError):
            return None
        return converted.date() if isinstance(converted, datetime) else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        match = _BR_DATE_RE.match(text)
        if match:
            day, month, year = (int(part) for part in match.groups())
            try:
                return date(year, month, day)
            except ValueError:
                return None
    return None


def normalize_name(value: Any) -> str:
    """Case- and whitespace-insensitive comparison key; accents still count."""
    return " ".join(str(value or "").split()).casefold()


def fold_accents(value: Any) -> str:
    """``normalize_name`` with combining accents removed, for matching labels."""
    decomposed = unicodedata.normalize("NFD", normalize_name(value))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def parse_reference_list(value: Any) -> list[int]:
    """
    Split a comma-separated list of sale / service-order numbers.

    Fragments that are not integers are dropped silently: they are notes or
    stray text, not identifiers.
    """
    if value is None or isinstance(value, bool):
        return []
    if isinstance(value, numbers.Real):
        number = cell_integer(value)
        return [number] if number is not None else []
    references: list[int] = []
    for fragment in str(value).split(","):
        number = cell_integer(fragment.strip())
        if number is not None:
            references.append(number)
    return references


# ═══════════════════════════════════════════════════════════════
# Parser base
# ═══════════════════════════════════════════════════════════════

@dataclass
class ParseOutcome:
    records: list
    errors: list[ErrorRecord] = field(default_factory=list)
    readable: bool = True


class WorkbookParser(ABC):
    """Reads one workbook and converts its data rows into records."""

    file_label: str
    layout: ColumnLayout

    def parse(self, raw_bytes: bytes) -> ParseOutcome:
        try:
            rows = read_workbook(raw_bytes, self.file_label)
        except WorkbookReadError as exc:
            logger.warning("%s workbook unreadable: %s", self.file_label, exc)
            return ParseOutcome(records=[], errors=[exc.error], readable=False)

        numbered = list(enumerate(rows, start=1))[self.layout.skip_rows:]
        records, errors = self.parse_rows(numbered)
        logger.info(
            "%s: %d rows read, %d records, %d errors",
            self.file_label, len(numbered), len(records), len(errors),
        )
        return ParseOutcome(records=records, errors=errors)

    @abstractmethod
    def parse_rows(self, rows: Iterable[tuple[int, Row]]) -> tuple[list, list[ErrorRecord]]:
        """Convert ``(sheet line, row)`` pairs into ``(records, errors)``."""

    def missing_field(self, line: int, field_name: str, row: Row, description: str) -> ErrorRecord:
        column = self.layout[field_name]
        return ErrorRecord(
            kind=ErrorKind.PARSE,
            file=self.file_label,
            line=line,
            column=column,
            value=row.get(column),
            description=description,
        )
