"""Record type domain service."""

from typing import Optional
from finrecon.database.base import Database
from finrecon.domain.entities import BalanceEffect, RecordType
from finrecon.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    record_type_not_found,
)


class RecordTypeService:
    """Service for managing record types."""

    def __init__(self, db: Database):
        """Initialize record type service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_record_type(self, name: str, balance_effect: BalanceEffect | str) -> int:
        """Create a record type.

        Args:
            name: Display name, unique
            balance_effect: Balance effect or its string value

        Returns:
            Record type ID

        Raises:
            ValidationError: If the name is empty or the effect is unknown
            ConflictError: If a type with this name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Record type name cannot be empty")
        try:
            effect = BalanceEffect(balance_effect)
        except ValueError:
            raise ValidationError(f"Unknown balance effect: {balance_effect!r}") from None

        if self.db.get_record_type_by_name(name) is not None:
            raise ConflictError(f"Record type '{name}' already exists")
        return self.db.create_record_type(name=name, balance_effect=effect)

    def get_record_type(self, type_id: int) -> Optional[RecordType]:
        """Get record type by ID."""
        return self.db.get_record_type(type_id)

    def list_record_types(self) -> list[RecordType]:
        """List all record types."""
        return self.db.list_record_types()

    def resolve(self, type_ref: str) -> RecordType:
        """Resolve a record type by ID or name.

        Raises:
            NotFoundError: If no type matches
        """
        type_ref = type_ref.strip()
        record_type = None
        if type_ref.isdigit():
            record_type = self.db.get_record_type(int(type_ref))
        if record_type is None:
            record_type = self.db.get_record_type_by_name(type_ref)
        if record_type is None:
            raise NotFoundError(record_type_not_found(type_ref))
        return record_type

    def require_default_for_effect(self, effect: BalanceEffect) -> RecordType:
        """Return the first record type with the given balance effect.

        Raises:
            NotFoundError: If no type has this effect
        """
        for record_type in self.db.list_record_types():
            if record_type.balance_effect == effect:
                return record_type
        raise NotFoundError(
            f"No record type with balance effect '{effect.value}'. Run 'finrecon init-types' first."
        )
