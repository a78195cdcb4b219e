"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the recurrence rule can be kept
as flat columns while the domain works with a RecurrenceRule value.
"""

from decimal import Decimal

from finrecon.domain import entities as domain
from finrecon.database.models import (
    Record as ORMRecord,
    RecordType as ORMRecordType,
    ScheduledItem as ORMScheduledItem,
)


def record_type_to_domain(orm_type: ORMRecordType) -> domain.RecordType:
    """Convert SQLAlchemy RecordType model to domain RecordType entity."""
    return domain.RecordType(
        id=orm_type.id,
        name=orm_type.name,
        balance_effect=domain.BalanceEffect(orm_type.balance_effect),
        created_at=orm_type.created_at,
    )


def record_to_domain(orm_record: ORMRecord) -> domain.PersistedRecord:
    """Convert SQLAlchemy Record model to domain PersistedRecord entity."""
    return domain.PersistedRecord(
        id=orm_record.id,
        date=orm_record.date,
        amount=Decimal(orm_record.amount),
        description=orm_record.description or "",
        type_id=orm_record.type_id,
        category=orm_record.category,
        link_group_id=orm_record.link_group_id,
        parent_id=orm_record.parent_id,
        source_id=orm_record.source_id,
        imported_at=orm_record.imported_at,
    )


def week_days_to_column(week_days: tuple[int, ...]) -> str | None:
    """Serialize weekday numbers for storage."""
    if not week_days:
        return None
    return ",".join(str(day) for day in week_days)


def week_days_from_column(value: str | None) -> tuple[int, ...]:
    """Parse stored weekday numbers."""
    if not value:
        return ()
    return tuple(int(part) for part in value.split(",") if part.strip())


def rule_to_domain(orm_item: ORMScheduledItem) -> domain.RecurrenceRule:
    """Build the domain RecurrenceRule from scheduled item columns."""
    return domain.RecurrenceRule(
        frequency=domain.Frequency(orm_item.frequency),
        interval=orm_item.interval,
        end_date=orm_item.end_date,
        by_month_day=orm_item.by_month_day,
        by_week_days=week_days_from_column(orm_item.by_week_days),
    )


def scheduled_item_to_domain(orm_item: ORMScheduledItem) -> domain.ScheduledItem:
    """Convert SQLAlchemy ScheduledItem model to domain ScheduledItem entity."""
    return domain.ScheduledItem(
        id=orm_item.id,
        title=orm_item.title,
        date=orm_item.date,
        rule=rule_to_domain(orm_item),
        amount=Decimal(orm_item.amount) if orm_item.amount is not None else None,
        description=orm_item.description,
        type_id=orm_item.type_id,
        is_completed=orm_item.is_completed,
        source_item_id=orm_item.source_item_id,
        created_at=orm_item.created_at,
    )
