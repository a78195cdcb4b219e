"""Per-day calendar index merging ledger records with scheduled occurrences."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from finrecon.domain.entities import (
    BalanceEffect,
    DayEntry,
    Occurrence,
    PersistedRecord,
    RecordType,
    ScheduledItem,
)
from finrecon.domain.errors import ValidationError, invalid_window
from finrecon.domain.projection import (
    MAX_PROJECTION_ITERATIONS,
    materialized_dates,
    occurrences_for_item,
)


def _split_parent_ids(records: Iterable[PersistedRecord]) -> set[int]:
    return {record.parent_id for record in records if record.parent_id is not None}


def build_day_index(
    records: Sequence[PersistedRecord],
    items: Sequence[ScheduledItem],
    record_types: Sequence[RecordType],
    window_start: date,
    window_end: date,
    max_iterations: int = MAX_PROJECTION_ITERATIONS,
) -> dict[date, DayEntry]:
    """Group records and scheduled occurrences by day.

    Only days in the window that carry at least one record or occurrence
    appear, in date order. Day totals add record amounts per balance effect
    of the record's type; split parents are left out of the totals because
    their children already carry the amount.

    Args:
        records: Persisted records to place on the calendar
        items: Scheduled items, expanded with their projected occurrences
            (minus the dates already materialized as items of their own)
        record_types: Record types used to resolve balance effects
        window_start: First visible date (inclusive)
        window_end: Last visible date (inclusive)
        max_iterations: Projection ceiling per scheduled item

    Returns:
        Ordered mapping of day to DayEntry

    Raises:
        ValidationError: If the window is inverted
    """
    if window_end < window_start:
        raise ValidationError(invalid_window(window_start, window_end))

    effects = {record_type.id: record_type.balance_effect for record_type in record_types}
    parent_ids = _split_parent_ids(records)

    day_records: dict[date, list[PersistedRecord]] = {}
    day_occurrences: dict[date, list[Occurrence]] = {}
    day_totals: dict[date, dict[BalanceEffect, Decimal]] = {}

    for record in records:
        if not window_start <= record.date <= window_end:
            continue
        day_records.setdefault(record.date, []).append(record)
        if record.id in parent_ids:
            continue
        effect = effects.get(record.type_id, BalanceEffect.OTHER)
        totals = day_totals.setdefault(record.date, {})
        totals[effect] = totals.get(effect, Decimal("0")) + record.amount

    materialized = materialized_dates(items)
    for item in items:
        occurrences = occurrences_for_item(
            item,
            window_start,
            window_end,
            max_iterations,
            exclude_dates=materialized.get(item.id, frozenset()),
        )
        for occurrence in occurrences:
            day_occurrences.setdefault(occurrence.date, []).append(occurrence)

    index: dict[date, DayEntry] = {}
    for day in sorted(set(day_records) | set(day_occurrences)):
        index[day] = DayEntry(
            day=day,
            records=tuple(day_records.get(day, ())),
            occurrences=tuple(day_occurrences.get(day, ())),
            totals=dict(day_totals.get(day, {})),
        )
    return index


def summarize_window(index: dict[date, DayEntry]) -> dict[BalanceEffect, Decimal]:
    """Add up the day totals of an index per balance effect."""
    summary: dict[BalanceEffect, Decimal] = {}
    for entry in index.values():
        for effect, amount in entry.totals.items():
            summary[effect] = summary.get(effect, Decimal("0")) + amount
    return summary
