# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Value types for Cartola Ingest.

All objects defined here are transient: they are created while a single
statement is parsed and handed back to the caller. Nothing is cached or
shared between two calls.

Main types
----------
- ``ParsedTransaction``: one normalized bank movement.
- ``ColumnMap``: zero-based indices of the logical columns in the sheet.
- ``RowOutcome``: what a single row produced (transactions and warnings).
- ``ParseResult``: the outcome of a whole parse (data or error).
- ``ParserOptions``: tunable parse policy, defaults match the bank format.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

TransactionType = Literal["ingreso", "egreso"]

# (1-based sheet row number, raw cell values)
NumberedRow = tuple[int, list[Any]]

INCOME: TransactionType = "ingreso"
EXPENSE: TransactionType = "egreso"

# Logical column -> header substrings. Order matters: it is the order in
# which columns are resolved and reported.
DEFAULT_HEADER_SYNONYMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("date", ("fecha",)),
    ("description", ("descripción", "descripcion")),
    ("charge", ("cargo", "cheque")),
    ("deposit", ("abono", "depósito")),
)


class StatementError(ValueError):
    """Structural problem that prevents a statement from being parsed."""


@dataclass(frozen=True)
class ParsedTransaction:
    """A normalized bank movement extracted from one statement row."""

    date: str
    description: str
    amount: int
    type: TransactionType

    def __post_init__(self) -> None:
        if (self.type == INCOME) != (self.amount > 0):
            raise ValueError(
                f"Inconsistent transaction: type={self.type!r} "
                f"with amount={self.amount}."
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
        }


@dataclass(frozen=True)
class ColumnMap:
    """
    Resolved positions of the logical columns in the header row.

    ``charge`` and ``deposit`` may individually be None, but at least one of
    them is always set once the map has been built by ``resolve_columns``.
    """

    date: int
    description: int
    charge: Optional[int]
    deposit: Optional[int]


@dataclass(frozen=True)
class RowOutcome:
    """Transactions (0, 1 or 2) and warnings produced by a single row."""

    transactions: tuple[ParsedTransaction, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def skipped(cls, warning: Optional[str] = None) -> "RowOutcome":
        """Outcome for a row that yields nothing, optionally with a warning."""
        return cls(warnings=(warning,) if warning else ())


@dataclass
class ParseResult:
    """
    Outcome of parsing one statement.

    Exactly one of ``data`` / ``error`` is set. ``warnings`` may accompany
    either of them: on success they describe the skipped rows, on error they
    explain why no transaction could be extracted.
    """

    file_name: str
    data: Optional[list[ParsedTransaction]] = None
    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(
        cls, file_name: str, error: str, warnings: Optional[list[str]] = None
    ) -> "ParseResult":
        return cls(file_name=file_name, error=error, warnings=list(warnings or []))

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation (absent keys are omitted)."""
        out: dict[str, Any] = {"fileName": self.file_name}
        if self.data is not None:
            out["data"] = [t.to_dict() for t in self.data]
        if self.error is not None:
            out["error"] = self.error
        if self.warnings:
            out["warnings"] = list(self.warnings)
        return out


@dataclass(frozen=True)
class ParserOptions:
    """
    Parse policy knobs.

    Attributes:
        header_synonyms: ordered (logical column, substrings) pairs used to
            resolve the header row.
        min_warning_description_length: zero-amount rows whose description
            is longer than this get a warning; shorter ones are dropped
            silently.
        two_digit_year_base: century added to two-digit years in text dates.
    """

    header_synonyms: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_HEADER_SYNONYMS
    min_warning_description_length: int = 3
    two_digit_year_base: int = 2000
