"""Projection of recurring scheduled items into a visible date window."""

import logging
from dataclasses import replace
from datetime import date
from typing import AbstractSet, Iterable, Iterator

from finrecon.domain.entities import (
    Occurrence,
    ProjectedOccurrence,
    RealOccurrence,
    ScheduledItem,
)
from finrecon.domain.errors import ValidationError, invalid_window
from finrecon.domain.recurrence import next_occurrence

logger = logging.getLogger(__name__)

MAX_PROJECTION_ITERATIONS = 50


def projected_occurrence_id(item_id: int, day: date) -> str:
    """Return the deterministic ID of a projected occurrence."""
    return f"{item_id}@{day.isoformat()}"


def project_occurrences(
    item: ScheduledItem,
    window_start: date,
    window_end: date,
    max_iterations: int = MAX_PROJECTION_ITERATIONS,
) -> Iterator[ProjectedOccurrence]:
    """Yield virtual future occurrences of a recurring item within a window.

    Iteration starts at the item's own date, which is the real occurrence and
    is never yielded. Every computed date consumes one iteration, including
    dates before ``window_start`` that are skipped. Hitting the iteration
    ceiling or a rule that does not advance ends the sequence early without
    raising.

    Args:
        item: Scheduled item carrying the recurrence rule
        window_start: First visible date (inclusive)
        window_end: Last visible date (inclusive)
        max_iterations: Ceiling on calls to the recurrence calculator

    Yields:
        Projected occurrences in date order

    Raises:
        ValidationError: If the window is inverted or the rule frequency is unknown
    """
    if window_end < window_start:
        raise ValidationError(invalid_window(window_start, window_end))

    rule = item.rule
    current = item.date
    for _ in range(max_iterations):
        following = next_occurrence(current, rule, preferred_day=item.date.day)
        if following is None:
            return
        if following <= current:
            logger.debug(
                "Projection of item %s stalled at %s (interval %s)",
                item.id,
                current,
                rule.interval,
            )
            return
        if rule.end_date is not None and following > rule.end_date:
            return
        if following > window_end:
            return

        current = following
        if current >= window_start:
            yield ProjectedOccurrence(
                id=projected_occurrence_id(item.id, current),
                source_id=item.id,
                date=current,
                item=replace(item, date=current, is_completed=False),
            )

    logger.debug(
        "Projection of item %s truncated after %d iterations at %s (window end %s)",
        item.id,
        max_iterations,
        current,
        window_end,
    )


def materialized_dates(items: Iterable[ScheduledItem]) -> dict[int, set[date]]:
    """Map each recurring item ID to the dates already materialized from it."""
    dates: dict[int, set[date]] = {}
    for item in items:
        if item.source_item_id is not None:
            dates.setdefault(item.source_item_id, set()).add(item.date)
    return dates


def occurrences_for_item(
    item: ScheduledItem,
    window_start: date,
    window_end: date,
    max_iterations: int = MAX_PROJECTION_ITERATIONS,
    exclude_dates: AbstractSet[date] = frozenset(),
) -> list[Occurrence]:
    """Return the real occurrence (if visible) followed by projected ones.

    Projected occurrences falling on ``exclude_dates`` are dropped; those days
    already hold a materialized item of their own.
    """
    occurrences: list[Occurrence] = []
    if window_start <= item.date <= window_end:
        occurrences.append(RealOccurrence(item))
    occurrences.extend(
        occurrence
        for occurrence in project_occurrences(item, window_start, window_end, max_iterations)
        if occurrence.date not in exclude_dates
    )
    return occurrences
