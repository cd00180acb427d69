# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Date cell resolution.

A statement date cell can reach us in three shapes, each modelled as an
explicit variant:

- ``NativeDateCell``: the workbook stored a real date (datetime / date),
- ``SerialDateCell``: a spreadsheet serial number (days since 1899-12-30),
- ``TextDateCell``:   free text in the local ``DD/MM`` or ``DD/MM/YY[YY]``
  format.

Anything else is an ``UnsupportedDateCell``. ``classify_date_cell`` picks the
variant once per row and ``resolve_date`` turns it into a ``DateResolution``
that carries either a datetime or a reason why the row must be skipped.
"""

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Union

import pandas as pd

# Serial number of 1970-01-01 in the 1900 date system.
SERIAL_UNIX_EPOCH = 25569
UNIX_EPOCH = datetime(1970, 1, 1)
MS_PER_DAY = 86400 * 1000


@dataclass(frozen=True)
class DateResolution:
    """Either a resolved datetime or the reason the cell was rejected."""

    value: Optional[datetime] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _today() -> date:
    """Return today's date (isolated for easier testing)."""
    return datetime.today().date()


def _build(year: int, month: int, day: int, raw: Any) -> DateResolution:
    try:
        return DateResolution(value=datetime(year, month, day))
    except ValueError:
        return DateResolution(reason=f"invalid date {raw!r}")


@dataclass(frozen=True)
class NativeDateCell:
    value: Union[datetime, date]

    def resolve(self, today: date, two_digit_year_base: int) -> DateResolution:
        if pd.isna(self.value):
            return DateResolution(reason=f"invalid date {self.value!r}")
        if isinstance(self.value, pd.Timestamp):
            return DateResolution(value=self.value.to_pydatetime())
        if isinstance(self.value, datetime):
            return DateResolution(value=self.value)
        return DateResolution(value=datetime.combine(self.value, time()))


@dataclass(frozen=True)
class SerialDateCell:
    value: float

    def resolve(self, today: date, two_digit_year_base: int) -> DateResolution:
        if not math.isfinite(self.value):
            return DateResolution(reason=f"invalid date {self.value!r}")
        millis = round((self.value - SERIAL_UNIX_EPOCH) * MS_PER_DAY)
        try:
            return DateResolution(value=UNIX_EPOCH + timedelta(milliseconds=millis))
        except OverflowError:
            return DateResolution(reason=f"invalid date {self.value!r}")


@dataclass(frozen=True)
class TextDateCell:
    value: str

    def resolve(self, today: date, two_digit_year_base: int) -> DateResolution:
        parts = [p.strip() for p in self.value.strip().split("/")]
        if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
            return DateResolution(
                reason=f"unrecognized date format {self.value!r} (expected DD/MM[/YY])"
            )

        day, month = int(parts[0]), int(parts[1])
        if len(parts) == 2:
            year = today.year
        else:
            year = int(parts[2])
            if len(parts[2]) <= 2:
                year += two_digit_year_base
        return _build(year, month, day, self.value)


@dataclass(frozen=True)
class UnsupportedDateCell:
    value: Any

    def resolve(self, today: date, two_digit_year_base: int) -> DateResolution:
        return DateResolution(
            reason=(
                f"unrecognized date value {self.value!r} "
                f"of type {type(self.value).__name__}"
            )
        )


DateCell = Union[NativeDateCell, SerialDateCell, TextDateCell, UnsupportedDateCell]


def classify_date_cell(value: Any) -> DateCell:
    """Pick the variant matching the runtime shape of a date cell."""
    if isinstance(value, (datetime, date)):
        return NativeDateCell(value)
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return SerialDateCell(float(value))
    if isinstance(value, str):
        return TextDateCell(value)
    return UnsupportedDateCell(value)


def resolve_date(
    value: Any,
    today: Optional[date] = None,
    two_digit_year_base: int = 2000,
) -> DateResolution:
    """
    Resolve a raw date cell.

    Args:
        value: Raw cell value as read from the sheet.
        today: Reference date used for ``DD/MM`` strings (defaults to today).
        two_digit_year_base: Century added to two-digit years.
    """
    cell = classify_date_cell(value)
    return cell.resolve(today or _today(), two_digit_year_base)


def to_iso(value: datetime) -> str:
    """ISO-8601 representation used for ParsedTransaction.date."""
    return value.isoformat(timespec="seconds")
