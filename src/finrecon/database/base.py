"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import ContextManager, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain services
from finrecon.domain.entities import (
    BalanceEffect,
    PersistedRecord,
    RecordType,
    RecurrenceRule,
    ScheduledItem,
)


class Database(ABC):
    """Abstract database interface for finrecon."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> ContextManager[None]:
        """Group several writes into one commit.

        Writes made inside the block are committed together when it exits
        and rolled back together if it raises. Blocks may be nested; only the
        outermost one commits.
        """
        pass

    # Record type operations
    @abstractmethod
    def create_record_type(self, name: str, balance_effect: BalanceEffect) -> int:
        """Create a record type. Returns record type ID."""
        pass

    @abstractmethod
    def get_record_type(self, type_id: int) -> Optional[RecordType]:
        """Get record type by ID."""
        pass

    @abstractmethod
    def get_record_type_by_name(self, name: str) -> Optional[RecordType]:
        """Get record type by name."""
        pass

    @abstractmethod
    def list_record_types(self) -> list[RecordType]:
        """List record types in creation order."""
        pass

    # Record operations
    @abstractmethod
    def create_record(
        self,
        date: date,
        amount: Decimal,
        description: str,
        type_id: int,
        category: Optional[str] = None,
        source_id: Optional[str] = None,
        parent_id: Optional[int] = None,
        link_group_id: Optional[str] = None,
    ) -> int:
        """Create a record. Returns record ID."""
        pass

    @abstractmethod
    def get_record(self, record_id: int) -> Optional[PersistedRecord]:
        """Get record by ID."""
        pass

    @abstractmethod
    def list_records(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        link_group_id: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> list[PersistedRecord]:
        """List records ordered by date then ID.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            link_group_id: Optional link group filter
            parent_id: Optional split parent filter
        """
        pass

    @abstractmethod
    def update_record(
        self,
        record_id: int,
        type_id: Optional[int] = None,
        category: Optional[str] = None,
        link_group_id: Optional[str] = None,
        clear_category: bool = False,
        clear_link_group: bool = False,
    ) -> None:
        """Update mutable record fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_record(self, record_id: int) -> None:
        """Delete a record."""
        pass

    # Scheduled item operations
    @abstractmethod
    def create_scheduled_item(
        self,
        title: str,
        date: date,
        rule: RecurrenceRule,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        type_id: Optional[int] = None,
        source_item_id: Optional[int] = None,
    ) -> int:
        """Create a scheduled item. Returns scheduled item ID.

        Args:
            source_item_id: Recurring item this one was materialized from
        """
        pass

    @abstractmethod
    def get_scheduled_item(self, item_id: int) -> Optional[ScheduledItem]:
        """Get scheduled item by ID."""
        pass

    @abstractmethod
    def list_scheduled_items(self) -> list[ScheduledItem]:
        """List scheduled items ordered by date."""
        pass

    @abstractmethod
    def set_scheduled_item_completed(self, item_id: int, is_completed: bool) -> None:
        """Mark a scheduled item as completed or not."""
        pass

    @abstractmethod
    def delete_scheduled_item(self, item_id: int) -> None:
        """Delete a scheduled item."""
        pass
