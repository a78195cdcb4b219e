"""Tests for recurrence arithmetic."""

from datetime import date

import pytest

from finrecon.domain.entities import Frequency, RecurrenceRule
from finrecon.domain.errors import ValidationError
from finrecon.domain.recurrence import next_occurrence, validate_rule


def rule(frequency, **kwargs):
    return RecurrenceRule(frequency=Frequency(frequency), **kwargs)


def test_none_frequency_has_no_next():
    assert next_occurrence(date(2024, 1, 1), RecurrenceRule()) is None


def test_daily_and_weekly_steps():
    assert next_occurrence(date(2024, 2, 28), rule("daily")) == date(2024, 2, 29)
    assert next_occurrence(date(2024, 1, 1), rule("daily", interval=3)) == date(2024, 1, 4)
    assert next_occurrence(date(2024, 1, 1), rule("weekly")) == date(2024, 1, 8)
    assert next_occurrence(date(2024, 1, 1), rule("weekly", interval=2)) == date(2024, 1, 15)


def test_monthly_clamps_to_end_of_february_in_leap_year():
    assert next_occurrence(date(2024, 1, 31), rule("monthly")) == date(2024, 2, 29)


def test_monthly_clamps_to_end_of_february_in_common_year():
    assert next_occurrence(date(2023, 1, 31), rule("monthly")) == date(2023, 2, 28)


def test_monthly_preferred_day_avoids_drift():
    assert next_occurrence(date(2024, 2, 29), rule("monthly"), preferred_day=31) == date(2024, 3, 31)
    assert next_occurrence(date(2024, 2, 29), rule("monthly")) == date(2024, 3, 29)


def test_monthly_last_day_of_month():
    last_day = rule("monthly", by_month_day=-1)
    assert next_occurrence(date(2024, 1, 31), last_day) == date(2024, 2, 29)
    assert next_occurrence(date(2024, 2, 29), last_day) == date(2024, 3, 31)
    assert next_occurrence(date(2024, 4, 30), last_day) == date(2024, 5, 31)


def test_monthly_fixed_day():
    assert next_occurrence(date(2024, 1, 3), rule("monthly", by_month_day=15)) == date(2024, 2, 15)


def test_yearly_leap_day_clamps():
    assert next_occurrence(date(2024, 2, 29), rule("yearly")) == date(2025, 2, 28)


def test_yearly_leap_day_returns_in_leap_year():
    assert next_occurrence(date(2027, 2, 28), rule("yearly"), preferred_day=29) == date(2028, 2, 29)


def test_weekly_listed_weekdays():
    mon_wed_fri = rule("weekly", by_week_days=(0, 2, 4))
    # 2024-01-01 is a Monday
    assert next_occurrence(date(2024, 1, 1), mon_wed_fri) == date(2024, 1, 3)
    assert next_occurrence(date(2024, 1, 3), mon_wed_fri) == date(2024, 1, 5)
    assert next_occurrence(date(2024, 1, 5), mon_wed_fri) == date(2024, 1, 8)


def test_weekly_listed_weekdays_with_interval_skips_weeks_on_wrap():
    every_other_tuesday = rule("weekly", interval=2, by_week_days=(1,))
    assert next_occurrence(date(2024, 1, 2), every_other_tuesday) == date(2024, 1, 16)


def test_zero_interval_does_not_advance():
    assert next_occurrence(date(2024, 1, 1), rule("daily", interval=0)) == date(2024, 1, 1)


def test_unknown_frequency_raises():
    with pytest.raises(ValidationError, match="Unrecognized recurrence frequency"):
        next_occurrence(date(2024, 1, 1), RecurrenceRule(frequency="fortnightly"))


class TestValidateRule:
    def test_valid_rules(self):
        validate_rule(RecurrenceRule())
        validate_rule(rule("monthly", interval=3, by_month_day=-1))
        validate_rule(rule("weekly", by_week_days=(0, 6)))

    @pytest.mark.parametrize("interval", [0, -1])
    def test_non_positive_interval(self, interval):
        with pytest.raises(ValidationError, match="positive integer"):
            validate_rule(rule("daily", interval=interval))

    def test_month_day_out_of_range(self):
        with pytest.raises(ValidationError, match="1-31"):
            validate_rule(rule("monthly", by_month_day=32))

    def test_month_day_on_weekly_rule(self):
        with pytest.raises(ValidationError, match="monthly rules"):
            validate_rule(rule("weekly", by_month_day=5))

    def test_weekday_out_of_range(self):
        with pytest.raises(ValidationError, match="Weekdays"):
            validate_rule(rule("weekly", by_week_days=(7,)))

    def test_weekdays_on_daily_rule(self):
        with pytest.raises(ValidationError, match="weekly rules"):
            validate_rule(rule("daily", by_week_days=(1,)))

    def test_unknown_frequency(self):
        with pytest.raises(ValidationError):
            validate_rule(RecurrenceRule(frequency="hourly"))
