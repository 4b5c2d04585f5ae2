"""Excel writer for travel reports (one sheet per entity plus a summary)."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path
from typing import Mapping, Sequence

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .aggregation import build_rows, build_summary
from .config import REPORT_COLUMN_ORDER, REPORT_TIMEZONE
from .models import ReportEntry

SUMMARY_SHEET = "Summary"
MAX_SHEET_NAME_LEN = 31
EXCEL_DATETIME_FORMAT = "yyyy-mm-dd hh:mm:ss"
# Characters Excel rejects in sheet titles.
_INVALID_SHEET_CHARS = set("[]:*?/\\")

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(patternType="solid", fgColor="FFDDEBF7")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)

LOGGER = logging.getLogger(__name__)

PathInput = str | Path | PathLike[str]


def _coerce_path(pathlike: PathInput) -> str:
    return str(Path(pathlike))


def _unique_sheet_name(base: str, used: set[str]) -> str:
    base = "".join("_" if ch in _INVALID_SHEET_CHARS else ch for ch in base)
    base = (base or "Entity")[:MAX_SHEET_NAME_LEN]
    name = base
    i = 1
    while name in used:
        suffix = f"_{i}"
        name = base[: MAX_SHEET_NAME_LEN - len(suffix)] + suffix
        i += 1
    used.add(name)
    return name


def _style_header_row(ws: Worksheet, column_count: int) -> None:
    for col_idx in range(1, column_count + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER


def _autosize(ws: Worksheet) -> None:
    from .config import (
        EXCEL_AUTOSIZE_COLUMNS,
        EXCEL_AUTOSIZE_MAX_ROWS,
        EXCEL_AUTOSIZE_MAX_WIDTH,
        EXCEL_AUTOSIZE_MIN_WIDTH,
        EXCEL_AUTOSIZE_PADDING,
    )

    if not EXCEL_AUTOSIZE_COLUMNS:
        return
    if ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
        return
    for col_cells in ws.columns:
        max_len = 0
        col_letter = getattr(col_cells[0], "column_letter", None)
        for cell in col_cells:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        width = min(
            EXCEL_AUTOSIZE_MAX_WIDTH,
            max(EXCEL_AUTOSIZE_MIN_WIDTH, max_len + EXCEL_AUTOSIZE_PADDING),
        )
        if col_letter:
            ws.column_dimensions[col_letter].width = width


def _write_frame(
    writer: pd.ExcelWriter, df: pd.DataFrame, sheet_name: str
) -> None:
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = writer.sheets.get(sheet_name)
    if ws is None:
        return
    _style_header_row(ws, len(df.columns))
    _autosize(ws)


def _entries_frame(entries: Sequence[ReportEntry], tz_name: str) -> pd.DataFrame:
    df = pd.DataFrame(build_rows(entries, tz_name), columns=REPORT_COLUMN_ORDER)
    return df


def write_report(
    filepath: PathInput,
    reports: Mapping[str, Sequence[ReportEntry]],
    tz_name: str = REPORT_TIMEZONE,
) -> None:
    """Write every entity report and a summary sheet to ``filepath``."""

    filepath = _coerce_path(filepath)
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)
    summary_rows = []
    with pd.ExcelWriter(
        filepath, engine="openpyxl", datetime_format=EXCEL_DATETIME_FORMAT
    ) as writer:
        used_sheet_names: set[str] = {SUMMARY_SHEET}
        for entity_id, entries in reports.items():
            sheet_name = _unique_sheet_name(str(entity_id), used_sheet_names)
            _write_frame(writer, _entries_frame(entries, tz_name), sheet_name)
            LOGGER.info(
                "Wrote report sheet: %s rows=%d", sheet_name, len(entries)
            )
            summary_rows.append({"Entity": entity_id, **build_summary(entries)})
        _write_frame(writer, pd.DataFrame(summary_rows), SUMMARY_SHEET)


__all__ = ["SUMMARY_SHEET", "write_report"]
