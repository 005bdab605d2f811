"""Spreadsheet export of the history list."""

from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from tt.common.logger import log
from tt.core.duration import format_decimal_hours, format_hours_minutes
from tt.util import format_datetime

SHEET_TITLE = "Time Log"
HEADERS = ["User", "Client", "Task", "Description", "Start", "End", "Duration", "Duration (Hours)"]
UNSPECIFIED_USER = "Unspecified"


class ExportError(Exception):
    pass


def export_filename(today=None):
    today = today or date.today()
    return f"registro-tiempo-{today.isoformat()}.xlsx"


def export_rows(entries, fallback_username=None):
    rows = [list(HEADERS)]
    for e in entries:
        rows.append([
            e.username or fallback_username or UNSPECIFIED_USER,
            e.client,
            e.task,
            e.description or "",
            format_datetime(e.start),
            format_datetime(e.end),
            format_hours_minutes(e.duration),
            format_decimal_hours(e.duration),
        ])
    return rows


# Writes every given entry to a single-sheet workbook in `directory` and returns the file path.
def write_xlsx(entries, directory, fallback_username=None, today=None):
    entries = list(entries)
    if not entries:
        raise ExportError("There are no entries to export")

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    for row in export_rows(entries, fallback_username):
        ws.append(row)

    # Rough auto-width so the sheet is readable when opened
    for col_idx, header in enumerate(HEADERS, start=1):
        longest = max(len(str(ws.cell(row=r, column=col_idx).value or "")) for r in range(1, ws.max_row + 1))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(60, max(len(header), longest) + 2)

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target_path = directory / export_filename(today)
    wb.save(target_path)
    log.info(f"Exported {len(entries)} entries to '{target_path}'")
    return target_path
