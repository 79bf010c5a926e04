"""Loader for stored changeover matrices (CSV or Excel workbook)."""

from __future__ import annotations

import csv
import functools
import logging
from pathlib import Path
from typing import Iterable, Optional

from openpyxl import load_workbook

from ..config import settings
from ..models.domain import MatrixEntry

REQUIRED_COLUMNS = ("Attribute", "FromValue", "ToValue", "Minutes")


def _coerce_minutes(value: object) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value or "").strip().replace(",", ".")
    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Unable to parse minutes from value '{value}'") from exc


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def _entries_from_rows(rows: Iterable[dict], source_path: Path) -> tuple[MatrixEntry, ...]:
    entries: list[MatrixEntry] = []
    for row in rows:
        attribute = _text(row.get("Attribute"))
        if not attribute:
            continue
        try:
            minutes = _coerce_minutes(row.get("Minutes"))
        except ValueError as exc:
            logging.warning(f"Skipping matrix row in '{source_path.name}': {exc}")
            continue
        entries.append(
            MatrixEntry(
                attribute=attribute,
                from_value=_text(row.get("FromValue")),
                to_value=_text(row.get("ToValue")),
                minutes=minutes,
                source=_text(row.get("Source")) or "imported",
                notes=_text(row.get("Notes")) or None,
            )
        )
    return tuple(entries)


def _check_header(header: Iterable[object], source_path: Path) -> None:
    missing = set(REQUIRED_COLUMNS) - {_text(name) for name in header}
    if missing:
        raise ValueError(f"Matrix file '{source_path.name}' missing columns: {', '.join(sorted(missing))}")


def _load_from_csv(csv_path: Path) -> tuple[MatrixEntry, ...]:
    with csv_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Matrix file '{csv_path}' is missing a header row.")
        _check_header(reader.fieldnames, csv_path)
        return _entries_from_rows(reader, csv_path)


def _load_from_workbook(workbook_path: Path) -> tuple[MatrixEntry, ...]:
    wb = load_workbook(workbook_path, data_only=True, read_only=True)
    try:
        sheet = wb.active
        rows = sheet.iter_rows(min_row=1, values_only=True)
        header = next(rows, None)
        if header is None:
            raise ValueError(f"Matrix workbook '{workbook_path}' is empty.")
        _check_header(header, workbook_path)
        names = [_text(name) for name in header]
        return _entries_from_rows((dict(zip(names, row)) for row in rows), workbook_path)
    finally:
        wb.close()


@functools.lru_cache(maxsize=4)
def load_matrix_entries(source: Optional[Path] = None) -> tuple[MatrixEntry, ...]:
    """Load matrix entries from the configured file."""

    matrix_path = source or settings.matrix_file
    if matrix_path is None:
        return tuple()
    if not matrix_path.exists():
        raise FileNotFoundError(f"Changeover matrix file not found: {matrix_path}")

    if matrix_path.suffix.lower() in {".xlsx", ".xlsm"}:
        entries = _load_from_workbook(matrix_path)
    else:
        entries = _load_from_csv(matrix_path)
    logging.info(f"Loaded {len(entries)} changeover matrix entries from '{matrix_path.name}'")
    return entries
