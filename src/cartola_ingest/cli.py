# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Cartola Ingest.

The CLI plays the part of the application that receives an upload: it
checks the file against the upload limits, hands the bytes to the parser
and renders the result. It does not implement any parsing logic itself.


High-level pipeline
-------------------

1) Load the TOML configuration (``cartola_config.toml`` by default, or the
   file given with ``--config``) using ``load_app_config()``.

2) Configure structlog (``--log-level`` overrides ``[logging].level``).

3) Validate the statement file (extension, size) with ``validate_upload``.

4) Parse it with ``parse_statement``.

5) Render the transactions and the warnings in the selected format.


Output formats
--------------

- ``table`` (default): a console table followed by totals and warnings.
- ``json``: the result as JSON (``data`` / ``error`` / ``warnings`` /
  ``fileName``). With ``--company-id`` and ``--account-id`` the ``data``
  entries are replaced by the records an application would store.
- ``csv``: transactions as CSV, written to ``--output`` or stdout.


Exit status
-----------

- 0: at least one transaction was extracted,
- 1: the statement could not be parsed (the error is printed),
- 2: invalid arguments or upload rejected.

Usage examples
--------------

    python -m cartola_ingest.cli cartola_marzo.xlsx
    python -m cartola_ingest.cli cartola_marzo.xlsx --format json
    python -m cartola_ingest.cli cartola_marzo.xlsx --format csv --output out.csv
    python -m cartola_ingest.cli cartola_marzo.xlsx --format json \\
        --company-id acme --account-id cta-corriente
"""

import argparse
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from . import __version__
from .config import LOG_LEVELS, load_app_config
from .io import UploadError, validate_upload
from .logging_config import configure_logging
from .models import ParseResult
from .parser import parse_statement
from .records import build_transaction_records, summarize, transactions_to_dataframe


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m cartola_ingest.cli",
        description=(
            "Cartola Ingest - reads a bank statement spreadsheet (.xlsx/.xlsm), "
            "detects its date, description, charge and deposit columns and "
            "prints the normalized transactions with any warnings."
        ),
    )

    ap.add_argument(
        "statement",
        nargs="?",
        help="Path to the bank statement workbook (.xlsx or .xlsm).",
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of cartola_ingest and exit.",
    )

    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'cartola_config.toml' in the current directory is used when present."
        ),
    )

    ap.add_argument(
        "--format",
        dest="output_format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format (default: table).",
    )

    ap.add_argument(
        "--output",
        dest="output_path",
        help="Write the output to this file instead of stdout (json and csv only).",
    )

    ap.add_argument(
        "--company-id",
        dest="company_id",
        help="Company identifier added to each record (requires --account-id).",
    )

    ap.add_argument(
        "--account-id",
        dest="account_id",
        help="Bank account identifier added to each record (requires --company-id).",
    )

    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=LOG_LEVELS,
        help="Override the logging level from the configuration file.",
    )

    return ap


def _emit(text: str, output_path: Optional[str]) -> None:
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        print(f"Wrote {path}")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def _print_warnings(result: ParseResult) -> None:
    if not result.warnings:
        return
    print()
    print(f"Warnings ({len(result.warnings)}):")
    for warning in result.warnings:
        print(f"  - {warning}")


def _render_table(result: ParseResult) -> None:
    df = transactions_to_dataframe(result)
    print(f"Statement: {result.file_name}")
    print()
    print(df.to_string(index=False))

    totals = summarize(result)
    print()
    print(
        f"Transactions: {totals.count} "
        f"({totals.income_count} ingresos, {totals.expense_count} egresos) | "
        f"Income: {totals.total_income} | Expense: {totals.total_expense} | "
        f"Net: {totals.net}"
    )
    _print_warnings(result)


def _render_json(result: ParseResult, args: argparse.Namespace) -> str:
    payload = result.to_dict()
    if result.ok and args.company_id:
        payload["data"] = build_transaction_records(
            result, args.company_id, args.account_id
        )
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the Cartola Ingest CLI.

    Parses the command-line arguments, loads the configuration, validates
    and parses the statement file, and renders the result in the selected
    format. Exits with status 1 when the statement cannot be parsed.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"cartola_ingest version {__version__}")
        return

    if not args.statement:
        parser.error("the statement file is required.")

    if bool(args.company_id) != bool(args.account_id):
        parser.error("--company-id and --account-id must be given together.")

    if args.output_path and args.output_format == "table":
        parser.error("--output requires --format json or csv.")

    # 1) Configuration and logging
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    configure_logging(
        level=args.log_level or config.logging.level,
        json_output=config.logging.json_output,
    )

    # 2) Upload checks
    statement_path = Path(args.statement)
    if not statement_path.is_file():
        parser.error(f"Statement file not found: {statement_path}")

    try:
        validate_upload(
            statement_path.name,
            statement_path.stat().st_size,
            config.upload,
        )
    except UploadError as exc:
        parser.error(str(exc))

    # 3) Parse
    result = parse_statement(
        statement_path.read_bytes(),
        statement_path.name,
        options=config.parser,
    )

    # 4) Render
    if args.output_format == "json":
        _emit(_render_json(result, args), args.output_path)
    elif not result.ok:
        print(f"Error: {result.error}")
        _print_warnings(result)
    elif args.output_format == "csv":
        csv_text = transactions_to_dataframe(result).to_csv(index=False)
        _emit(csv_text, args.output_path)
        if args.output_path:
            _print_warnings(result)
    else:
        _render_table(result)

    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
