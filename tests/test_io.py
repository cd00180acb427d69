from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook

from cartola_ingest.config import UploadSettings
from cartola_ingest.io import UploadError, read_raw_sheet, validate_upload
from cartola_ingest.models import StatementError


def make_workbook(sheets) -> bytes:
    """Build an in-memory .xlsx. ``sheets`` maps sheet titles to rows."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def test_read_raw_sheet_keeps_cell_types_and_drops_blank_rows():
    content = make_workbook(
        {
            "Movimientos": [
                ["Fecha", "Descripción", "Cargos"],
                [datetime(2024, 3, 1), "Pago", 1500],
                [None, None, None],
                ["02/03/24", "Otro", None],
            ]
        }
    )

    rows = read_raw_sheet(content)

    assert len(rows) == 3
    assert rows[0] == (1, ["Fecha", "Descripción", "Cargos"])
    assert rows[1][1][0] == datetime(2024, 3, 1)
    assert rows[1][1][2] == 1500
    assert rows[2] == (4, ["02/03/24", "Otro", None])


def test_read_raw_sheet_uses_first_sheet_only():
    content = make_workbook(
        {
            "Primera": [["Fecha"], ["01/03/24"]],
            "Segunda": [["Otra"], ["x"], ["y"]],
        }
    )
    rows = read_raw_sheet(content)
    assert rows == [(1, ["Fecha"]), (2, ["01/03/24"])]


def test_read_raw_sheet_keeps_na_like_text():
    content = make_workbook(
        {
            "Movimientos": [
                ["Fecha", "Descripción", "Cargos", "Abonos"],
                ["01/03/24", "N/A", "1000", None],
                ["02/03/24", "NULL", None, "NA"],
                ["03/03/24", "#N/A", "nan", ""],
            ]
        }
    )

    rows = read_raw_sheet(content)

    assert rows[1] == (2, ["01/03/24", "N/A", "1000", None])
    assert rows[2] == (3, ["02/03/24", "NULL", None, "NA"])
    assert rows[3][1][1:3] == ["#N/A", "nan"]


def test_read_raw_sheet_numbers_rows_as_in_the_sheet():
    content = make_workbook(
        {
            "Movimientos": [
                ["Fecha", "Descripción", "Cargos"],
                [None, None, None],
                [None, None, None],
                ["01/03/24", "Pago", 1500],
                ["fecha rota", "Otro", 200],
            ]
        }
    )

    rows = read_raw_sheet(content)

    assert [number for number, _ in rows] == [1, 4, 5]


def test_read_raw_sheet_rejects_garbage():
    with pytest.raises(StatementError, match="unreadable workbook"):
        read_raw_sheet(b"\x00\x01garbage")


def test_validate_upload_accepts_xlsx():
    validate_upload(
        "cartola.XLSX",
        2048,
        UploadSettings(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


@pytest.mark.parametrize(
    "file_name, size, content_type, match",
    [
        ("cartola.csv", 10, None, "Unsupported file type"),
        ("cartola", 10, None, "Unsupported file type"),
        ("cartola.xlsx", 10, "text/csv", "Unsupported MIME type"),
        ("cartola.xlsx", 0, None, "is empty"),
        ("cartola.xlsm", 2_000, None, "too large"),
    ],
)
def test_validate_upload_rejections(file_name, size, content_type, match):
    settings = UploadSettings(max_bytes=1_000)
    with pytest.raises(UploadError, match=match):
        validate_upload(file_name, size, settings, content_type=content_type)
