# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Cartola Ingest.

This module turns uploaded workbook bytes into a raw sheet (a list of
numbered rows, each a list of cell values) and validates uploads before they
reach the parser.

Raw sheet format
----------------
Only the first sheet of the workbook is read, through openpyxl, without any
header interpretation. Cell values are kept exactly as the workbook stores
them (text such as "N/A" or "NULL" stays text):

    - text cells        → ``str``
    - numeric cells     → ``int`` / ``float``
    - date cells        → ``datetime``
    - empty cells       → ``None``

Each row is paired with its 1-based row number in the sheet. Rows whose
cells are all empty are dropped here and nowhere else; the numbers of the
remaining rows are unaffected.

Upload validation
-----------------
``validate_upload`` is meant for callers (CLI, web handlers): it checks the
file extension, the declared MIME type and the size against the
``[upload]`` configuration. The parser itself never enforces these limits.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional

from openpyxl import load_workbook

from .config import UploadSettings
from .models import NumberedRow, StatementError

XLSX_MIME_TYPES = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel.sheet.macroenabled.12",
    }
)


class UploadError(ValueError):
    """Raised when an uploaded file is rejected before parsing."""


def read_raw_sheet(content: bytes) -> list[NumberedRow]:
    """
    Read the first sheet of an .xlsx/.xlsm workbook.

    Parameters
    ----------
    content:
        Raw workbook bytes.

    Returns
    -------
    list[tuple[int, list[Any]]]
        ``(row_number, cells)`` for every non-blank row of the first sheet,
        header included. ``row_number`` is the 1-based sheet row.

    Raises
    ------
    StatementError
        If the bytes are not a readable workbook, if the workbook has no
        sheet, or if its first sheet cannot be loaded.
    """
    try:
        workbook = load_workbook(BytesIO(content), data_only=True)
    except Exception as exc:  # noqa: BLE001
        raise StatementError(f"unreadable workbook: {exc}") from exc

    if not workbook.sheetnames:
        raise StatementError("no sheets: the workbook does not contain any sheet.")

    first_sheet = workbook.sheetnames[0]
    try:
        worksheet = workbook[first_sheet]
    except KeyError as exc:
        raise StatementError(f"sheet not found: {first_sheet!r}") from exc

    rows: list[NumberedRow] = []
    sheet_rows = worksheet.iter_rows(values_only=True)
    for row_number, values in enumerate(sheet_rows, start=1):
        if all(value is None for value in values):
            continue
        rows.append((row_number, list(values)))
    return rows


def validate_upload(
    file_name: str,
    size: int,
    settings: UploadSettings,
    content_type: Optional[str] = None,
) -> None:
    """
    Check an upload against the configured limits.

    Raises
    ------
    UploadError
        If the extension is not allowed, if the declared MIME type is not a
        spreadsheet type, if the file is empty or larger than allowed.
    """
    suffix = Path(file_name).suffix.lower()
    if suffix not in settings.allowed_extensions:
        allowed = ", ".join(settings.allowed_extensions)
        raise UploadError(
            f"Unsupported file type {suffix or '(none)'!r} for {file_name!r}. "
            f"Expected one of: {allowed}."
        )

    if content_type is not None and content_type.lower() not in XLSX_MIME_TYPES:
        raise UploadError(
            f"Unsupported MIME type {content_type!r} for {file_name!r}."
        )

    if size <= 0:
        raise UploadError(f"File {file_name!r} is empty.")

    if size > settings.max_bytes:
        raise UploadError(
            f"File {file_name!r} is too large ({size} bytes, "
            f"maximum {settings.max_bytes})."
        )
