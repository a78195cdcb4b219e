"""Ledger record domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from finrecon.database.base import Database
from finrecon.domain.entities import LinkRole, PersistedRecord
from finrecon.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    record_not_found,
    record_type_not_found,
)
from finrecon.domain.linking import check_balance
from finrecon.domain.signature import normalize_amount


class RecordService:
    """Service for managing ledger records."""

    def __init__(self, db: Database):
        """Initialize record service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_record(
        self,
        date: date,
        amount: Decimal,
        type_id: int,
        description: str = "",
        category: Optional[str] = None,
        source_id: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> int:
        """Create a record.

        Args:
            date: Record date
            amount: Non-negative magnitude, stored rounded half-up to cents
            type_id: Record type ID
            description: Free text description
            category: Optional category label
            source_id: Optional identifier from the import source
            parent_id: Optional split parent record ID

        Returns:
            Record ID

        Raises:
            ValidationError: If the amount is negative
            NotFoundError: If the type or parent doesn't exist
        """
        if amount < 0:
            raise ValidationError(
                f"Record amount must be a non-negative magnitude, got {amount}; "
                "use the record type to express direction"
            )

        if self.db.get_record_type(type_id) is None:
            raise NotFoundError(record_type_not_found(type_id))

        if parent_id is not None and self.db.get_record(parent_id) is None:
            raise NotFoundError(record_not_found(parent_id))

        return self.db.create_record(
            date=date,
            amount=normalize_amount(amount),
            description=description or "",
            type_id=type_id,
            category=category,
            source_id=source_id,
            parent_id=parent_id,
        )

    def get_record(self, record_id: int) -> Optional[PersistedRecord]:
        """Get record by ID."""
        return self.db.get_record(record_id)

    def require_record(self, record_id: int) -> PersistedRecord:
        """Get record by ID or raise NotFoundError."""
        record = self.db.get_record(record_id)
        if record is None:
            raise NotFoundError(record_not_found(record_id))
        return record

    def list_records(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        link_group_id: Optional[str] = None,
    ) -> list[PersistedRecord]:
        """List records with optional filters."""
        return self.db.list_records(
            start_date=start_date, end_date=end_date, link_group_id=link_group_id
        )

    def update_category(self, record_id: int, category: Optional[str]) -> None:
        """Set or clear the category of a record.

        Raises:
            NotFoundError: If the record doesn't exist
        """
        self.require_record(record_id)
        if category:
            self.db.update_record(record_id, category=category)
        else:
            self.db.update_record(record_id, clear_category=True)

    def update_type(self, record_id: int, type_id: int) -> None:
        """Change the record type of a record.

        Raises:
            NotFoundError: If the record or type doesn't exist
        """
        self.require_record(record_id)
        if self.db.get_record_type(type_id) is None:
            raise NotFoundError(record_type_not_found(type_id))
        self.db.update_record(record_id, type_id=type_id)

    def delete_record(self, record_id: int) -> None:
        """Delete a record.

        Raises:
            NotFoundError: If the record doesn't exist
            ConflictError: If the record has split children
        """
        self.require_record(record_id)
        children = self.db.list_records(parent_id=record_id)
        if children:
            raise ConflictError(
                f"Cannot delete record {record_id}: it has {len(children)} "
                f"split record{'s' if len(children) != 1 else ''}. Delete them first."
            )
        self.db.delete_record(record_id)

    def split_record(
        self,
        parent_id: int,
        parts: Sequence[tuple[Decimal, Optional[str], Optional[str]]],
    ) -> list[int]:
        """Split a record into child records.

        Args:
            parent_id: Record to split
            parts: (amount, description, category) per child; a missing
                description falls back to the parent's

        Returns:
            IDs of the created child records

        Raises:
            NotFoundError: If the parent doesn't exist
            ConflictError: If the parent is already split or is itself a split
            ValidationError: If fewer than two parts are given or they don't
                add up to the parent amount
        """
        parent = self.require_record(parent_id)
        if parent.parent_id is not None:
            raise ConflictError(f"Record {parent_id} is already part of a split")
        if self.db.list_records(parent_id=parent_id):
            raise ConflictError(f"Record {parent_id} is already split")
        if len(parts) < 2:
            raise ValidationError("A split needs at least 2 parts")
        if any(amount < 0 for amount, _, _ in parts):
            raise ValidationError("Split amounts must be non-negative magnitudes")

        # The parent funds the split the same way a link source funds allocations
        drafts = [
            PersistedRecord(
                id=-(index + 1),
                date=parent.date,
                amount=normalize_amount(amount),
                description=description or parent.description,
                type_id=parent.type_id,
                category=category,
                link_group_id=None,
                parent_id=parent.id,
                source_id=None,
                imported_at=parent.imported_at,
            )
            for index, (amount, description, category) in enumerate(parts)
        ]
        roles = {parent.id: LinkRole.SOURCE}
        roles.update({draft.id: LinkRole.ALLOCATION for draft in drafts})
        balance = check_balance([parent, *drafts], roles)
        if not balance.balanced:
            raise ValidationError(
                f"Split parts total {balance.allocation_total} but record {parent_id} "
                f"is {balance.source_total} (difference {balance.difference})"
            )

        with self.db.transaction():
            return [
                self.db.create_record(
                    date=draft.date,
                    amount=draft.amount,
                    description=draft.description,
                    type_id=draft.type_id,
                    category=draft.category,
                    parent_id=parent.id,
                )
                for draft in drafts
            ]
