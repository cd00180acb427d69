# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Caller-side helpers around a ParseResult.

The parser does not store anything. Applications persist one record per
transaction, tagged with the company and bank account the statement belongs
to and with the time of the import. ``build_transaction_records`` produces
exactly those records; storing them is up to the caller.

``transactions_to_dataframe`` and ``summarize`` serve display and export.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd

from .models import EXPENSE, INCOME, ParseResult

TRANSACTION_COLUMNS = ["date", "description", "amount", "type"]


@dataclass(frozen=True)
class StatementSummary:
    """Totals of a parsed statement (amounts in whole currency units)."""

    count: int
    income_count: int
    expense_count: int
    total_income: int
    total_expense: int

    @property
    def net(self) -> int:
        return self.total_income + self.total_expense


def build_transaction_records(
    result: ParseResult,
    company_id: str,
    account_id: str,
    imported_at: Optional[datetime] = None,
) -> list[dict[str, Any]]:
    """
    Build the records an application stores for a successful import.

    Parameters
    ----------
    result:
        A successful ParseResult.
    company_id, account_id:
        Tenant and bank account identifiers supplied by the caller.
    imported_at:
        Import timestamp. Defaults to the current UTC time; naive values
        are taken as UTC.

    Returns
    -------
    list[dict]
        One dict per transaction with keys ``companyId``, ``accountId``,
        ``date``, ``description``, ``amount``, ``type``,
        ``originalFileName`` and ``importedAt``.

    Raises
    ------
    ValueError
        If the result carries an error or the identifiers are blank.
    """
    if not result.ok:
        raise ValueError(
            f"Cannot build records from a failed import of {result.file_name!r}: "
            f"{result.error}"
        )
    if not company_id or not account_id:
        raise ValueError("company_id and account_id are required.")

    if imported_at is None:
        imported_at = datetime.now(timezone.utc)
    elif imported_at.tzinfo is None:
        imported_at = imported_at.replace(tzinfo=timezone.utc)
    imported_iso = imported_at.isoformat()

    return [
        {
            "companyId": company_id,
            "accountId": account_id,
            **txn.to_dict(),
            "originalFileName": result.file_name,
            "importedAt": imported_iso,
        }
        for txn in result.data or []
    ]


def transactions_to_dataframe(result: ParseResult) -> pd.DataFrame:
    """
    Return the transactions of a result as a DataFrame.

    The frame always has the columns date, description, amount and type,
    and is empty for failed results.
    """
    rows = [txn.to_dict() for txn in result.data or []]
    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    df["amount"] = df["amount"].astype("int64")
    return df


def summarize(result: ParseResult) -> StatementSummary:
    """Count transactions and total income / expense amounts."""
    data = result.data or []
    incomes = [t.amount for t in data if t.type == INCOME]
    expenses = [t.amount for t in data if t.type == EXPENSE]
    return StatementSummary(
        count=len(data),
        income_count=len(incomes),
        expense_count=len(expenses),
        total_income=sum(incomes),
        total_expense=sum(expenses),
    )
