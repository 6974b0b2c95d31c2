from __future__ import annotations

from datetime import date, datetime, time

import pytest

from holitime.common.datetime_utils import (
    format_minutes,
    format_time_12h,
    minutes_between,
    parse_hhmm,
    parse_iso_date,
    round_time,
    shift_window,
)
from holitime.core.exceptions import ValidationError


def test_round_down_to_quarter_hour():
    assert round_time(datetime(2025, 1, 1, 8, 7, 59), "down") == datetime(2025, 1, 1, 8, 0)
    assert round_time(datetime(2025, 1, 1, 8, 15), "down") == datetime(2025, 1, 1, 8, 15)


def test_round_up_to_quarter_hour():
    assert round_time(datetime(2025, 1, 1, 16, 1), "up") == datetime(2025, 1, 1, 16, 15)
    assert round_time(datetime(2025, 1, 1, 16, 0, 40), "up") == datetime(2025, 1, 1, 16, 0)
    assert round_time(datetime(2025, 1, 1, 23, 50), "up") == datetime(2025, 1, 2, 0, 0)


def test_round_rejects_unknown_direction():
    with pytest.raises(ValueError):
        round_time(datetime(2025, 1, 1, 8, 0), "sideways")


def test_shift_window_crosses_midnight():
    start, end = shift_window(date(2025, 1, 1), time(22, 0), time(2, 0))
    assert start == datetime(2025, 1, 1, 22, 0)
    assert end == datetime(2025, 1, 2, 2, 0)


def test_parsers():
    assert parse_iso_date("2025-02-03") == date(2025, 2, 3)
    assert parse_hhmm("07:30") == time(7, 30)
    assert parse_hhmm("07:30:15") == time(7, 30, 15)
    with pytest.raises(ValidationError):
        parse_iso_date("03/02/2025")
    with pytest.raises(ValidationError):
        parse_hhmm("7pm")


def test_formatting():
    assert minutes_between(datetime(2025, 1, 1, 8), datetime(2025, 1, 1, 7)) == 0
    assert format_minutes(125) == "02:05"
    assert format_time_12h(datetime(2025, 1, 1, 16, 0)) == "4:00 PM"
    assert format_time_12h(datetime(2025, 1, 1, 0, 5)) == "12:05 AM"
    assert format_time_12h(None) == "--:--"


def test_non_string_inputs_are_validation_errors():
    with pytest.raises(ValidationError):
        parse_iso_date(20250101)
    with pytest.raises(ValidationError):
        parse_iso_date(["2025-01-01"])
    with pytest.raises(ValidationError):
        parse_hhmm(900)
    with pytest.raises(ValidationError):
        parse_hhmm(None)
