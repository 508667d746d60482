"""Multi-sheet workbook assembly and serialization.

A workbook is an ordered mapping of sheet name -> table: ``"summary"`` first,
then one sheet per comparison sorted by key. Names that a spreadsheet
application would reject raise `SheetNameError` instead of being truncated,
and the file is written in one call through a temporary sibling so the
destination never holds a partial workbook.
"""

from __future__ import annotations

import contextlib
import logging
import math
from pathlib import Path
from typing import Any, Mapping

import numpy as np
import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError

from degbook.errors import SheetNameError, WorkbookWriteError

SUMMARY_SHEET = "summary"
MAX_SHEET_NAME_LEN = 31
FORBIDDEN_SHEET_CHARS = frozenset(":\\/?*[]")
WIDTH_SAMPLE_ROWS = 200


def validate_sheet_name(name: str) -> str:
    """Return `name` unchanged if it is a legal worksheet title."""
    if not isinstance(name, str):
        raise SheetNameError(str(name), f"expected a string, got {type(name).__name__}")
    if name == "":
        raise SheetNameError(name, "name is empty")
    if len(name) > MAX_SHEET_NAME_LEN:
        raise SheetNameError(
            name, f"{len(name)} characters exceeds the {MAX_SHEET_NAME_LEN}-character limit"
        )
    bad = sorted({ch for ch in name if ch in FORBIDDEN_SHEET_CHARS})
    if bad:
        raise SheetNameError(name, f"contains disallowed characters {''.join(bad)!r}")
    if name.startswith("'") or name.endswith("'"):
        raise SheetNameError(name, "names may not start or end with an apostrophe")
    return name


def build_sheets(
    summary: pd.DataFrame, partitions: Mapping[str, pd.DataFrame]
) -> dict[str, pd.DataFrame]:
    """Order and validate sheets: summary first, then partitions sorted by key."""
    sheets: dict[str, pd.DataFrame] = {SUMMARY_SHEET: summary}
    # Spreadsheet applications compare sheet titles case-insensitively.
    seen = {SUMMARY_SHEET.casefold(): SUMMARY_SHEET}
    for key in sorted(partitions):
        validate_sheet_name(key)
        folded = key.casefold()
        if folded in seen:
            raise SheetNameError(key, f"collides with sheet {seen[folded]!r}")
        seen[folded] = key
        sheets[key] = partitions[key]
    return sheets


def _cell_value(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def write_sheet(wb: Workbook, title: str, df: pd.DataFrame) -> None:
    """Write a DataFrame to a new worksheet with a styled, frozen header row."""
    ws = wb.create_sheet(title=title)

    header_fill = PatternFill("solid", fgColor="1F4E79")
    header_font = Font(bold=True, color="FFFFFF")
    header_align = Alignment(vertical="center", wrap_text=True)

    ws.append([str(c) for c in df.columns])
    for col_idx in range(1, len(df.columns) + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_align

    for row in df.itertuples(index=False, name=None):
        ws.append([_cell_value(v) for v in row])

    ws.freeze_panes = "A2"
    if len(df.columns) > 0:
        ws.auto_filter.ref = ws.dimensions

    for col_idx, col_name in enumerate(df.columns, start=1):
        sample = [_cell_value(v) for v in df.iloc[:WIDTH_SAMPLE_ROWS, col_idx - 1].tolist()]
        max_len = max([len(str(col_name))] + [len("" if v is None else str(v)) for v in sample])
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(10, max_len + 2), 60)


def write_workbook(
    summary: pd.DataFrame,
    partitions: Mapping[str, pd.DataFrame],
    destination: str | Path,
    *,
    logger: logging.Logger | None = None,
) -> Path:
    """Serialize the summary and per-comparison sheets to `destination`.

    Creates or overwrites exactly one file. Raises `SheetNameError` before
    touching the filesystem, and `WorkbookWriteError` when the destination
    cannot be written or a cell holds characters the format cannot store; in both cases no new file is left at `destination`.
    """
    log = logger or logging.getLogger("degbook")
    sheets = build_sheets(summary, partitions)

    out = Path(destination)
    tmp = out.with_name(f".{out.name}.tmp")
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        wb = Workbook()
        wb.remove(wb.active)
        for title, df in sheets.items():
            write_sheet(wb, title, df)
        wb.save(tmp)
        tmp.replace(out)
    except (OSError, IllegalCharacterError) as exc:
        raise WorkbookWriteError(f"Could not write workbook to {out}: {exc}") from exc
    finally:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)

    log.info("Wrote workbook %s with %d sheets", out.as_posix(), len(sheets))
    return out
