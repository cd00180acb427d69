# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Bank statement parser.

This module turns an uploaded statement (or an already extracted raw sheet)
into a list of ``ParsedTransaction`` objects plus advisory warnings.

Pipeline
--------
1) Read the first sheet of the workbook (see ``io.read_raw_sheet``).
2) Require a header and at least one data row.
3) Resolve the date / description / charge / deposit columns from the
   header (see ``columns.resolve_columns``).
4) Normalize every data row independently with ``normalize_row``. A row
   yields 0, 1 or 2 transactions and possibly a warning; a row never stops
   the batch.
5) Assemble the result: data with warnings, or a single error.

Failure model
-------------
Structural problems (unreadable workbook, missing sheet, header or columns,
nothing extracted) produce a ``ParseResult`` with ``error`` set. Row
problems only produce warnings. ``parse_statement`` and ``parse_rows`` never
raise for bad input.

Row policy
----------
- blank rows are skipped silently,
- rows with an unusable date are skipped with a warning,
- rows with no amount are skipped, with a warning only when the
  description is meaningful (longer than 3 characters by default),
- rows with both a charge and a deposit produce two transactions
  (" (Abono)" income and " (Cargo)" expense) and a warning,
- other rows produce one income (deposit) or expense (charge).
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from typing import Any, Optional

import structlog

from . import dates
from .amounts import parse_amount
from .columns import resolve_columns
from .io import read_raw_sheet
from .models import (
    EXPENSE,
    INCOME,
    ColumnMap,
    NumberedRow,
    ParsedTransaction,
    ParseResult,
    ParserOptions,
    RowOutcome,
    StatementError,
)

# Events go through the standard logging module; without configure_logging()
# they follow its defaults and never reach stdout.
logger = structlog.wrap_logger(
    logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger
)


def _cell(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _is_blank_row(row: Optional[Sequence[Any]]) -> bool:
    if not row:
        return True
    return all(cell is None or str(cell).strip() == "" for cell in row)


def _format_row(row: Sequence[Any]) -> str:
    return ", ".join("" if cell is None else str(cell) for cell in row)


def normalize_row(
    row: Sequence[Any],
    columns: ColumnMap,
    options: ParserOptions,
    today: date,
    row_number: int,
) -> RowOutcome:
    """
    Normalize one data row.

    Args:
        row: Raw cell values.
        columns: Resolved column positions.
        options: Parse policy.
        today: Reference date for ``DD/MM`` dates without a year.
        row_number: Position of the row in the sheet, used in warnings.

    Returns:
        A RowOutcome with 0, 1 or 2 transactions and the row's warnings.
    """
    resolved = dates.resolve_date(
        _cell(row, columns.date),
        today=today,
        two_digit_year_base=options.two_digit_year_base,
    )
    if not resolved.ok:
        return RowOutcome.skipped(f"Row {row_number} skipped: {resolved.reason}.")

    iso_date = dates.to_iso(resolved.value)

    raw_description = _cell(row, columns.description)
    description = "" if raw_description is None else str(raw_description).strip()

    charge = parse_amount(_cell(row, columns.charge))
    deposit = parse_amount(_cell(row, columns.deposit))

    if charge == 0 and deposit == 0:
        if len(description) > options.min_warning_description_length:
            return RowOutcome.skipped(
                f'Row {row_number} skipped: no charge or deposit amount for "{description}".'
            )
        return RowOutcome.skipped()

    if charge != 0 and deposit != 0:
        warning = (
            f"Row {row_number}: both a charge ({charge}) and a deposit ({deposit}) "
            f'are set for "{description}". Recorded as two separate transactions.'
        )
        return RowOutcome(
            transactions=(
                ParsedTransaction(
                    date=iso_date,
                    description=f"{description} (Abono)",
                    amount=abs(deposit),
                    type=INCOME,
                ),
                ParsedTransaction(
                    date=iso_date,
                    description=f"{description} (Cargo)",
                    amount=-abs(charge),
                    type=EXPENSE,
                ),
            ),
            warnings=(warning,),
        )

    if deposit != 0:
        txn = ParsedTransaction(
            date=iso_date, description=description, amount=abs(deposit), type=INCOME
        )
    else:
        txn = ParsedTransaction(
            date=iso_date, description=description, amount=-abs(charge), type=EXPENSE
        )
    return RowOutcome(transactions=(txn,))


def _parse_rows(
    rows: list[NumberedRow],
    file_name: str,
    options: ParserOptions,
    today: date,
) -> ParseResult:
    if len(rows) < 2:
        raise StatementError(
            "insufficient data: the sheet needs a header and at least one data row."
        )

    (_, header), data_rows = rows[0], rows[1:]
    columns = resolve_columns(header, options.header_synonyms)

    transactions: list[ParsedTransaction] = []
    warnings: list[str] = []

    for row_number, row in data_rows:
        if _is_blank_row(row):
            continue

        try:
            outcome = normalize_row(row, columns, options, today, row_number)
        except Exception as exc:  # noqa: BLE001
            logger.exception("row_failed", file_name=file_name, row=row_number)
            outcome = RowOutcome.skipped(
                f"Row {row_number}: error while processing the row ({exc}). "
                f"Row: {_format_row(row)}"
            )

        transactions.extend(outcome.transactions)
        warnings.extend(outcome.warnings)

    if not transactions:
        if not warnings:
            raise StatementError("no valid transactions found in the statement.")
        return ParseResult.failure(
            file_name, "no transactions extracted, see warnings.", warnings
        )

    return ParseResult(file_name=file_name, data=transactions, warnings=warnings)


def _run(
    file_name: str, step: Callable[..., ParseResult], *args: Any
) -> ParseResult:
    """Run a parse step, turning any failure into an error result."""
    try:
        result = step(*args)
    except StatementError as exc:
        result = ParseResult.failure(file_name, str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("statement_failed", file_name=file_name)
        result = ParseResult.failure(file_name, f"failed to process workbook: {exc}")

    if result.ok:
        logger.info(
            "statement_parsed",
            file_name=file_name,
            transactions=len(result.data or []),
            warnings=len(result.warnings),
        )
    else:
        logger.warning(
            "statement_rejected",
            file_name=file_name,
            error=result.error,
            warnings=len(result.warnings),
        )
    return result


def parse_rows(
    rows: Iterable[Sequence[Any]],
    file_name: str,
    options: Optional[ParserOptions] = None,
    today: Optional[date] = None,
) -> ParseResult:
    """
    Parse an already extracted raw sheet (header row first).

    Args:
        rows: Rows of cell values, the first one being the header. Rows are
            numbered from 1 (the header) in warnings.
        file_name: Original file name, echoed back in the result.
        options: Parse policy (defaults to ``ParserOptions()``).
        today: Reference date for ``DD/MM`` dates (defaults to today).

    Returns:
        A ParseResult; never raises for bad input.
    """
    return _run(
        file_name,
        _parse_rows,
        list(enumerate(rows, start=1)),
        file_name,
        options or ParserOptions(),
        today or dates._today(),
    )


def _parse_statement(
    content: bytes,
    file_name: str,
    options: ParserOptions,
    today: date,
) -> ParseResult:
    rows = read_raw_sheet(content)
    return _parse_rows(rows, file_name, options, today)


def parse_statement(
    content: bytes,
    file_name: str,
    options: Optional[ParserOptions] = None,
    today: Optional[date] = None,
) -> ParseResult:
    """
    Parse an uploaded .xlsx/.xlsm bank statement.

    Only the first sheet is read. The file name is used for diagnostics
    only. The function has no side effects besides logging.

    Args:
        content: Raw workbook bytes.
        file_name: Original file name, echoed back in the result.
        options: Parse policy (defaults to ``ParserOptions()``).
        today: Reference date for ``DD/MM`` dates (defaults to today).

    Returns:
        A ParseResult with either ``data`` (and possibly ``warnings``) or
        ``error``.
    """
    return _run(
        file_name,
        _parse_statement,
        content,
        file_name,
        options or ParserOptions(),
        today or dates._today(),
    )
