from datetime import date, datetime

import pandas as pd
import pytest

import cartola_ingest.dates as dates
from cartola_ingest.dates import (
    NativeDateCell,
    SerialDateCell,
    TextDateCell,
    UnsupportedDateCell,
    classify_date_cell,
    resolve_date,
    to_iso,
)

TODAY = date(2026, 10, 18)


@pytest.mark.parametrize(
    "value, expected",
    [
        (datetime(2024, 3, 1), NativeDateCell),
        (date(2024, 3, 1), NativeDateCell),
        (pd.Timestamp("2024-03-01"), NativeDateCell),
        (45352, SerialDateCell),
        (45352.25, SerialDateCell),
        ("01/03/24", TextDateCell),
        (None, UnsupportedDateCell),
        (True, UnsupportedDateCell),
        ([1, 3, 2024], UnsupportedDateCell),
    ],
)
def test_classify_date_cell(value, expected):
    assert isinstance(classify_date_cell(value), expected)


def test_native_dates_are_used_directly():
    assert resolve_date(datetime(2024, 3, 1, 9, 30), TODAY).value == datetime(2024, 3, 1, 9, 30)
    assert resolve_date(date(2024, 3, 1), TODAY).value == datetime(2024, 3, 1)
    assert resolve_date(pd.Timestamp("2024-03-01"), TODAY).value == datetime(2024, 3, 1)


def test_serial_dates():
    """Serial 45352 is 2024-03-01; fractions are a time of day."""
    assert resolve_date(45352, TODAY).value == datetime(2024, 3, 1)
    assert resolve_date(45352.5, TODAY).value == datetime(2024, 3, 1, 12, 0)
    assert resolve_date(25569, TODAY).value == datetime(1970, 1, 1)


def test_serial_nan_is_rejected():
    res = resolve_date(float("nan"), TODAY)
    assert not res.ok
    assert "invalid date" in res.reason


def test_text_date_with_two_digit_year():
    assert resolve_date("01/03/24", TODAY).value == datetime(2024, 3, 1)
    assert resolve_date("15/08/05", TODAY).value.year == 2005


def test_text_date_with_four_digit_year():
    assert resolve_date(" 31/12/2023 ", TODAY).value == datetime(2023, 12, 31)


def test_text_date_without_year_uses_current_year():
    assert resolve_date("15/06", TODAY).value == datetime(2026, 6, 15)


def test_text_date_without_year_defaults_to_today(monkeypatch):
    monkeypatch.setattr(dates, "_today", lambda: date(2031, 1, 1))
    assert resolve_date("15/06").value == datetime(2031, 6, 15)


def test_two_digit_year_base_is_configurable():
    assert resolve_date("01/03/99", TODAY, two_digit_year_base=1900).value.year == 1999


@pytest.mark.parametrize("value", ["32/01/2024", "29/02/2023", "10/13/24", "00/01/24"])
def test_invalid_calendar_dates_are_rejected(value):
    res = resolve_date(value, TODAY)
    assert not res.ok
    assert res.reason == f"invalid date {value!r}"


@pytest.mark.parametrize("value", ["2024-99-99", "01/02/03/04", "aa/bb/cc", "", "1/"])
def test_unrecognized_text_is_rejected(value):
    res = resolve_date(value, TODAY)
    assert not res.ok
    assert repr(value) in res.reason


def test_unsupported_shape_names_value_and_type():
    res = resolve_date(None, TODAY)
    assert not res.ok
    assert "None" in res.reason
    assert "NoneType" in res.reason


def test_to_iso():
    assert to_iso(datetime(2024, 3, 1)) == "2024-03-01T00:00:00"
    assert to_iso(datetime(2024, 3, 1, 12, 0, 0, 500)) == "2024-03-01T12:00:00"
