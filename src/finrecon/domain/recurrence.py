"""Recurrence rule arithmetic on civil calendar dates."""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from finrecon.domain.entities import Frequency, RecurrenceRule
from finrecon.domain.errors import ValidationError

LAST_DAY_OF_MONTH = -1


def validate_rule(rule: RecurrenceRule) -> None:
    """Validate a recurrence rule before it is stored.

    Args:
        rule: Rule to validate

    Raises:
        ValidationError: If the frequency is unknown, the interval is not
            positive, or a day refinement is out of range
    """
    _require_frequency(rule.frequency)

    if not isinstance(rule.interval, int) or rule.interval < 1:
        raise ValidationError(
            f"Recurrence interval must be a positive integer, got {rule.interval!r}"
        )

    if rule.by_month_day is not None:
        if rule.frequency != Frequency.MONTHLY:
            raise ValidationError("Day of month can only be set on monthly rules")
        if rule.by_month_day != LAST_DAY_OF_MONTH and not 1 <= rule.by_month_day <= 31:
            raise ValidationError(
                f"Day of month must be 1-31 or -1 (last day), got {rule.by_month_day}"
            )

    if rule.by_week_days:
        if rule.frequency != Frequency.WEEKLY:
            raise ValidationError("Weekdays can only be set on weekly rules")
        invalid = [day for day in rule.by_week_days if not 0 <= day <= 6]
        if invalid:
            raise ValidationError(
                f"Weekdays must be 0 (Monday) to 6 (Sunday), got {invalid}"
            )


def next_occurrence(
    anchor: date, rule: RecurrenceRule, preferred_day: Optional[int] = None
) -> Optional[date]:
    """Compute the occurrence that follows ``anchor`` under ``rule``.

    Monthly and yearly steps clamp to the last valid day of the target
    month, so January 31 plus one month is the last day of February.
    ``preferred_day`` lets a caller iterating a series keep aiming at the
    series' original day of month instead of the clamped one.

    The interval is applied as stored. Rules are checked with
    :func:`validate_rule` when created; the projector bounds any degenerate
    rule that reaches it anyway.

    Args:
        anchor: Current occurrence date
        rule: Recurrence rule
        preferred_day: Optional day of month to target for monthly/yearly rules

    Returns:
        The next date, or None for a non-recurring rule

    Raises:
        ValidationError: If the rule frequency is not recognized
    """
    frequency = _require_frequency(rule.frequency)
    interval = rule.interval

    if frequency == Frequency.NONE:
        return None

    if frequency == Frequency.DAILY:
        return anchor + timedelta(days=interval)

    if frequency == Frequency.WEEKLY:
        if rule.by_week_days:
            return _next_listed_weekday(anchor, sorted(set(rule.by_week_days)), interval)
        return anchor + timedelta(weeks=interval)

    if frequency == Frequency.MONTHLY:
        target = anchor + relativedelta(months=interval)
        if rule.by_month_day == LAST_DAY_OF_MONTH:
            return target + relativedelta(day=31)
        day = rule.by_month_day or preferred_day
        if day:
            # relativedelta clamps the day to the month length
            return target + relativedelta(day=day)
        return target

    # Yearly: relativedelta maps Feb 29 to Feb 28 in non-leap years
    target = anchor + relativedelta(years=interval)
    if preferred_day:
        return target + relativedelta(day=preferred_day)
    return target


def _next_listed_weekday(anchor: date, weekdays: list[int], interval: int) -> date:
    """Advance to the next listed weekday, skipping ``interval - 1`` weeks on wrap."""
    current = anchor.weekday()
    later_this_week = [day for day in weekdays if day > current]
    if later_this_week:
        return anchor + timedelta(days=later_this_week[0] - current)

    days_to_week_end = 7 - current
    extra_weeks = max(0, interval - 1)
    return anchor + timedelta(days=days_to_week_end + extra_weeks * 7 + weekdays[0])


def _require_frequency(frequency) -> Frequency:
    try:
        return Frequency(frequency)
    except ValueError:
        raise ValidationError(f"Unrecognized recurrence frequency: {frequency!r}") from None
