import json
from io import BytesIO

import pytest
from openpyxl import Workbook

from cartola_ingest import __version__
from cartola_ingest.cli import main

HEADER = ["Fecha", "Descripción", "Cargos", "Abonos"]


def write_statement(path, rows):
    """Save the given rows as the first sheet of an .xlsx file."""
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    path.write_bytes(buffer.getvalue())
    return path


@pytest.fixture
def statement(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return write_statement(
        tmp_path / "cartola.xlsx",
        [
            HEADER,
            ["01/03/24", "Pago luz", "15000", None],
            ["02/03/24", "Venta", None, "$40.000"],
            ["xx/yy", "Fila rota", "100", None],
        ],
    )


def test_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == f"cartola_ingest version {__version__}"


def test_table_output(statement, capsys):
    main([str(statement)])
    out = capsys.readouterr().out

    assert "Statement: cartola.xlsx" in out
    assert "Pago luz" in out
    assert "Transactions: 2 (1 ingresos, 1 egresos)" in out
    assert "Net: 25000" in out
    assert "Warnings (1):" in out
    assert "xx/yy" in out


def test_json_output(statement, capsys):
    main([str(statement), "--format", "json"])
    payload = json.loads(capsys.readouterr().out)

    assert payload["fileName"] == "cartola.xlsx"
    assert [t["amount"] for t in payload["data"]] == [-15000, 40000]
    assert len(payload["warnings"]) == 1


def test_json_records_written_to_file(statement, tmp_path):
    output = tmp_path / "out" / "records.json"
    main(
        [
            str(statement),
            "--format",
            "json",
            "--company-id",
            "acme",
            "--account-id",
            "cc-01",
            "--output",
            str(output),
        ]
    )

    payload = json.loads(output.read_text(encoding="utf-8"))
    first = payload["data"][0]
    assert first["companyId"] == "acme"
    assert first["accountId"] == "cc-01"
    assert first["originalFileName"] == "cartola.xlsx"
    assert "importedAt" in first


def test_csv_output(statement, capsys):
    main([str(statement), "--format", "csv"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert lines[0] == "date,description,amount,type"
    assert lines[1] == "2024-03-01T00:00:00,Pago luz,-15000,egreso"
    assert len(lines) == 3


def test_parse_error_exits_with_status_1(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    path = write_statement(tmp_path / "vacia.xlsx", [HEADER])

    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])

    assert excinfo.value.code == 1
    assert "Error: insufficient data" in capsys.readouterr().out


def test_parse_error_in_json(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    path = write_statement(tmp_path / "mala.xlsx", [["Fecha", "Detalle"], ["01/03/24", "x"]])

    with pytest.raises(SystemExit) as excinfo:
        main([str(path), "--format", "json"])

    assert excinfo.value.code == 1
    payload = json.loads(capsys.readouterr().out)
    assert "data" not in payload
    assert "Cargos/Abonos" in payload["error"]


@pytest.mark.parametrize(
    "extra_args",
    [
        ["--company-id", "acme"],
        ["--output", "x.txt"],
        ["--config", "missing.toml"],
    ],
)
def test_usage_errors_exit_with_status_2(statement, extra_args):
    with pytest.raises(SystemExit) as excinfo:
        main([str(statement), *extra_args])
    assert excinfo.value.code == 2


def test_missing_statement_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "nope.xlsx")])
    assert excinfo.value.code == 2


def test_upload_rejected_by_extension(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "cartola.csv"
    path.write_text("Fecha,Descripción,Cargos\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])

    assert excinfo.value.code == 2
    assert "Unsupported file type" in capsys.readouterr().err


def test_upload_rejected_by_size(statement, tmp_path, capsys):
    config = tmp_path / "cartola_config.toml"
    config.write_text("[upload]\nmax_bytes = 10\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main([str(statement)])

    assert excinfo.value.code == 2
    assert "too large" in capsys.readouterr().err
