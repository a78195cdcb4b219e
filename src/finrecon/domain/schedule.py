"""Scheduled item domain service."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from finrecon.database.base import Database
from finrecon.domain.calendar_index import build_day_index
from finrecon.domain.entities import (
    DayEntry,
    Frequency,
    Occurrence,
    ProjectedOccurrence,
    RecurrenceRule,
    ScheduledItem,
)
from finrecon.domain.errors import (
    NotFoundError,
    ValidationError,
    record_type_not_found,
    scheduled_item_not_found,
)
from finrecon.domain.projection import (
    MAX_PROJECTION_ITERATIONS,
    materialized_dates,
    occurrences_for_item,
)
from finrecon.domain.recurrence import validate_rule


class ScheduleService:
    """Service for scheduled items and their calendar projection."""

    def __init__(self, db: Database, max_iterations: int = MAX_PROJECTION_ITERATIONS):
        """Initialize schedule service.

        Args:
            db: Database instance
            max_iterations: Projection ceiling per scheduled item
        """
        self.db = db
        self.max_iterations = max_iterations

    def create_item(
        self,
        title: str,
        date: date,
        rule: RecurrenceRule = RecurrenceRule(),
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        type_id: Optional[int] = None,
    ) -> int:
        """Create a scheduled item.

        Args:
            title: Item title
            date: Anchor date, the first real occurrence
            rule: Recurrence rule
            amount: Optional expected amount (non-negative)
            description: Optional description
            type_id: Optional record type ID

        Returns:
            Scheduled item ID

        Raises:
            ValidationError: If the title, amount or rule is invalid
            NotFoundError: If the record type doesn't exist
        """
        if not title or not title.strip():
            raise ValidationError("Scheduled item title cannot be empty")
        validate_rule(rule)
        if rule.end_date is not None and rule.end_date < date:
            raise ValidationError(
                f"Recurrence end date {rule.end_date} is before the start date {date}"
            )
        if amount is not None and amount < 0:
            raise ValidationError("Scheduled amount must be a non-negative magnitude")
        if type_id is not None and self.db.get_record_type(type_id) is None:
            raise NotFoundError(record_type_not_found(type_id))

        return self.db.create_scheduled_item(
            title=title.strip(),
            date=date,
            rule=rule,
            amount=amount,
            description=description,
            type_id=type_id,
        )

    def get_item(self, item_id: int) -> Optional[ScheduledItem]:
        """Get scheduled item by ID."""
        return self.db.get_scheduled_item(item_id)

    def require_item(self, item_id: int) -> ScheduledItem:
        """Get scheduled item by ID or raise NotFoundError."""
        item = self.db.get_scheduled_item(item_id)
        if item is None:
            raise NotFoundError(scheduled_item_not_found(item_id))
        return item

    def list_items(self) -> list[ScheduledItem]:
        """List all scheduled items."""
        return self.db.list_scheduled_items()

    def set_completed(self, item_id: int, is_completed: bool = True) -> None:
        """Mark the real occurrence of an item as completed or not."""
        self.require_item(item_id)
        self.db.set_scheduled_item_completed(item_id, is_completed)

    def delete_item(self, item_id: int) -> None:
        """Delete a scheduled item."""
        self.require_item(item_id)
        self.db.delete_scheduled_item(item_id)

    def project_item(
        self, item_id: int, window_start: date, window_end: date
    ) -> list[Occurrence]:
        """Return the real and projected occurrences of one item in a window."""
        item = self.require_item(item_id)
        materialized = materialized_dates(self.db.list_scheduled_items())
        return occurrences_for_item(
            item,
            window_start,
            window_end,
            self.max_iterations,
            exclude_dates=materialized.get(item_id, frozenset()),
        )

    def build_calendar(self, window_start: date, window_end: date) -> dict[date, DayEntry]:
        """Build the per-day calendar index for a window.

        Records and scheduled items are read fresh on every call; nothing
        projected is cached or stored.
        """
        return build_day_index(
            records=self.db.list_records(start_date=window_start, end_date=window_end),
            items=self.db.list_scheduled_items(),
            record_types=self.db.list_record_types(),
            window_start=window_start,
            window_end=window_end,
            max_iterations=self.max_iterations,
        )

    def materialize(
        self, occurrence: ProjectedOccurrence, title: Optional[str] = None
    ) -> int:
        """Turn a projected occurrence into a real, non-recurring item.

        Edits to a projected occurrence go through this first; the source
        item and its rule are left untouched. The new item remembers its
        source, so the source stops projecting onto that date.

        Args:
            occurrence: Projected occurrence to make real
            title: Optional new title

        Returns:
            ID of the new scheduled item

        Raises:
            ValidationError: If the occurrence is not a projected one
            NotFoundError: If the source item no longer exists
        """
        if not isinstance(occurrence, ProjectedOccurrence):
            raise ValidationError("Only projected occurrences can be materialized")
        self.require_item(occurrence.source_id)

        template = replace(occurrence.item, rule=RecurrenceRule(frequency=Frequency.NONE))
        return self.db.create_scheduled_item(
            title=title or template.title,
            date=occurrence.date,
            rule=template.rule,
            amount=template.amount,
            description=template.description,
            type_id=template.type_id,
            source_item_id=occurrence.source_id,
        )

    def find_occurrence(self, occurrence_id: str) -> ProjectedOccurrence:
        """Resolve a projected occurrence ID such as ``"3@2024-05-01"``.

        Raises:
            ValidationError: If the ID is malformed
            NotFoundError: If the item doesn't exist or the rule never lands
                on that date
        """
        item_part, _, date_part = occurrence_id.partition("@")
        try:
            item_id = int(item_part)
            day = date.fromisoformat(date_part)
        except ValueError:
            raise ValidationError(f"Malformed occurrence ID: '{occurrence_id}'") from None

        for occurrence in self.project_item(item_id, day, day):
            if isinstance(occurrence, ProjectedOccurrence):
                return occurrence
        raise NotFoundError(f"Item {item_id} has no projected occurrence on {day}")
