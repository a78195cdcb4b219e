"""Tests for date parser and calendar windows."""

import pytest
from datetime import date, timedelta
from finrecon.utils.date_parser import parse_date, get_window


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("01/15/2024") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    assert parse_date(" Yesterday ") == date.today() - timedelta(days=1)


def test_parse_tomorrow():
    """Test parsing 'tomorrow'."""
    assert parse_date("tomorrow") == date.today() + timedelta(days=1)


def test_parse_invalid_date():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("someday")


def test_window_this_month():
    """Test the full current month, including days after today."""
    assert get_window("this-month", today=date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_window_last_and_next_month_cross_year():
    """Test month windows across a year boundary."""
    assert get_window("last-month", today=date(2024, 1, 10)) == (date(2023, 12, 1), date(2023, 12, 31))
    assert get_window("next-month", today=date(2023, 12, 31)) == (date(2024, 1, 1), date(2024, 1, 31))


def test_window_weeks_start_on_monday():
    """Test week windows run Monday to Sunday."""
    # 2024-01-10 is a Wednesday
    assert get_window("this-week", today=date(2024, 1, 10)) == (date(2024, 1, 8), date(2024, 1, 14))
    assert get_window("next-week", today=date(2024, 1, 10)) == (date(2024, 1, 15), date(2024, 1, 21))


def test_window_years():
    """Test year windows."""
    assert get_window("this-year", today=date(2024, 6, 1)) == (date(2024, 1, 1), date(2024, 12, 31))
    assert get_window("next-year", today=date(2024, 6, 1)) == (date(2025, 1, 1), date(2025, 12, 31))


def test_window_unknown_period():
    """Test that an unknown period raises ValueError."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_window("fortnight")
