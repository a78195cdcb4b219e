"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from finrecon.database.models import (
    Record as ORMRecord,
    RecordType as ORMRecordType,
    ScheduledItem as ORMScheduledItem,
)
from finrecon.database.mappers import (
    record_to_domain,
    record_type_to_domain,
    scheduled_item_to_domain,
    week_days_from_column,
    week_days_to_column,
)
from finrecon.domain.entities import (
    BalanceEffect,
    Frequency,
    PersistedRecord,
    RecordType,
    RecurrenceRule,
    ScheduledItem,
)


class TestRecordTypeMapper:
    """Tests for RecordType mapper."""

    def test_record_type_to_domain(self):
        """Test converting ORM RecordType to domain RecordType."""
        orm_type = ORMRecordType(
            id=1,
            name="Transfer",
            balance_effect="transfer",
            created_at=datetime.now(UTC),
        )

        record_type = record_type_to_domain(orm_type)

        assert isinstance(record_type, RecordType)
        assert record_type.balance_effect == BalanceEffect.TRANSFER


class TestRecordMapper:
    """Tests for Record mapper."""

    def test_record_to_domain(self):
        """Test converting ORM Record to domain PersistedRecord."""
        orm_record = ORMRecord(
            id=5,
            date=date(2024, 1, 15),
            amount=Decimal("12.50"),
            description=None,
            type_id=2,
            category="Coffee",
            link_group_id="abc",
            parent_id=None,
            source_id=None,
            imported_at=datetime.now(UTC),
        )

        record = record_to_domain(orm_record)

        assert isinstance(record, PersistedRecord)
        assert record.description == ""
        assert record.amount == Decimal("12.50")
        assert record.link_group_id == "abc"


class TestScheduledItemMapper:
    """Tests for ScheduledItem mapper."""

    def test_scheduled_item_to_domain(self):
        """Test that flat rule columns become a RecurrenceRule."""
        orm_item = ORMScheduledItem(
            id=3,
            title="Gym",
            date=date(2024, 1, 1),
            amount=None,
            description=None,
            type_id=None,
            is_completed=False,
            frequency="weekly",
            interval=2,
            end_date=None,
            by_month_day=None,
            by_week_days="0,3",
            created_at=datetime.now(UTC),
        )

        item = scheduled_item_to_domain(orm_item)

        assert isinstance(item, ScheduledItem)
        assert item.amount is None
        assert item.rule == RecurrenceRule(
            frequency=Frequency.WEEKLY, interval=2, by_week_days=(0, 3)
        )

    def test_week_days_columns(self):
        """Test weekday serialization."""
        assert week_days_to_column(()) is None
        assert week_days_to_column((0, 4)) == "0,4"
        assert week_days_from_column(None) == ()
        assert week_days_from_column("0,4") == (0, 4)
