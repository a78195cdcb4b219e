"""Link groups: role suggestion, balance verification and commit."""

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from finrecon.database.base import Database
from finrecon.domain.entities import (
    BalanceCheck,
    BalanceEffect,
    LinkResult,
    LinkRole,
    PersistedRecord,
    RecordType,
)
from finrecon.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    link_group_not_found,
    record_not_found,
    too_few_link_members,
)

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.01")


def suggest_roles(records: Sequence[PersistedRecord]) -> dict[int, LinkRole]:
    """Suggest a role for each record.

    The largest amount is assumed to be the source of funds and everything
    else an allocation. On ties the earliest record in input order wins. The
    result is only a default for the caller to override.
    """
    if not records:
        return {}
    source = max(records, key=lambda record: record.amount)
    return {
        record.id: LinkRole.SOURCE if record.id == source.id else LinkRole.ALLOCATION
        for record in records
    }


def check_balance(
    records: Iterable[PersistedRecord],
    roles: Mapping[int, LinkRole],
    tolerance: Decimal = BALANCE_TOLERANCE,
) -> BalanceCheck:
    """Compare source and allocation totals.

    Args:
        records: Records of the prospective group
        roles: Role per record ID; records without a role are ignored
        tolerance: Absolute difference still considered balanced

    Returns:
        BalanceCheck with the signed difference (source minus allocation)
    """
    source_total = Decimal("0")
    allocation_total = Decimal("0")
    for record in records:
        role = roles.get(record.id)
        if role == LinkRole.SOURCE:
            source_total += record.amount
        elif role == LinkRole.ALLOCATION:
            allocation_total += record.amount

    difference = source_total - allocation_total
    return BalanceCheck(
        source_total=source_total,
        allocation_total=allocation_total,
        difference=difference,
        balanced=abs(difference) < tolerance,
    )


def reconcile(
    records: Sequence[PersistedRecord],
    roles: Optional[Mapping[int, LinkRole]] = None,
    record_types: Sequence[RecordType] = (),
    categories: Optional[Mapping[int, Optional[str]]] = None,
    link_group_id: Optional[str] = None,
    tolerance: Decimal = BALANCE_TOLERANCE,
) -> LinkResult:
    """Build the updated records of a new link group without persisting them.

    Roles missing from ``roles`` are filled from :func:`suggest_roles`.
    Sources are re-typed to the first transfer type in ``record_types``;
    suggested allocations currently typed as a transfer, and explicit
    allocation overrides not already typed as an expense, are re-typed to the
    first expense type. Being out of balance is reported, not raised.

    Args:
        records: Selected records, at least two
        roles: Optional role overrides keyed by record ID
        record_types: Known record types used for role-driven re-typing
        categories: Optional category overrides keyed by record ID
        link_group_id: Group ID to stamp; a new UUID when omitted
        tolerance: Balance tolerance

    Returns:
        LinkResult with the stamped copies in input order

    Raises:
        ValidationError: If fewer than two records are selected, a record is
            selected twice, or an override names an unselected record
    """
    if len(records) < 2:
        raise ValidationError(too_few_link_members(len(records)))

    selected_ids = [record.id for record in records]
    if len(set(selected_ids)) != len(selected_ids):
        raise ValidationError("A record can only be selected once per link group")

    roles = dict(roles or {})
    categories = dict(categories or {})
    for label, overrides in (("role", roles), ("category", categories)):
        unknown = sorted(set(overrides) - set(selected_ids))
        if unknown:
            raise ValidationError(
                f"Cannot assign a {label} to unselected record(s): "
                f"{', '.join(str(record_id) for record_id in unknown)}"
            )

    assigned = suggest_roles(records)
    for record_id, role in roles.items():
        assigned[record_id] = LinkRole(role)

    types_by_id = {record_type.id: record_type for record_type in record_types}
    transfer_type = _first_type(record_types, BalanceEffect.TRANSFER)
    expense_type = _first_type(record_types, BalanceEffect.EXPENSE)

    group_id = link_group_id or str(uuid.uuid4())
    updated = []
    for record in records:
        role = assigned[record.id]
        type_id = record.type_id
        if role == LinkRole.SOURCE and transfer_type is not None:
            type_id = transfer_type.id
        elif role == LinkRole.ALLOCATION and expense_type is not None:
            current = types_by_id.get(record.type_id)
            if record.id in roles:
                # An allocation chosen by hand always lands on an expense type
                if current is None or current.balance_effect != BalanceEffect.EXPENSE:
                    type_id = expense_type.id
            elif current is not None and current.balance_effect == BalanceEffect.TRANSFER:
                type_id = expense_type.id

        category = categories.get(record.id, record.category)
        updated.append(
            replace(record, link_group_id=group_id, type_id=type_id, category=category)
        )

    return LinkResult(
        link_group_id=group_id,
        records=tuple(updated),
        roles=assigned,
        balance=check_balance(records, assigned, tolerance),
    )


def _first_type(
    record_types: Sequence[RecordType], effect: BalanceEffect
) -> Optional[RecordType]:
    for record_type in record_types:
        if record_type.balance_effect == effect:
            return record_type
    return None


class LinkService:
    """Service for grouping persisted records into link groups."""

    def __init__(self, db: Database):
        """Initialize link service.

        Args:
            db: Database instance
        """
        self.db = db

    def load_records(self, record_ids: Sequence[int]) -> list[PersistedRecord]:
        """Load records in the given order.

        Raises:
            NotFoundError: If any record doesn't exist
        """
        records = []
        for record_id in record_ids:
            record = self.db.get_record(record_id)
            if record is None:
                raise NotFoundError(record_not_found(record_id))
            records.append(record)
        return records

    def preview(
        self,
        record_ids: Sequence[int],
        roles: Optional[Mapping[int, LinkRole]] = None,
        categories: Optional[Mapping[int, Optional[str]]] = None,
    ) -> LinkResult:
        """Reconcile the selected records without saving anything."""
        records = self.load_records(record_ids)
        return reconcile(
            records,
            roles=roles,
            record_types=self.db.list_record_types(),
            categories=categories,
        )

    def link_records(
        self,
        record_ids: Sequence[int],
        roles: Optional[Mapping[int, LinkRole]] = None,
        categories: Optional[Mapping[int, Optional[str]]] = None,
        allow_relink: bool = False,
    ) -> LinkResult:
        """Reconcile the selected records and persist the new group.

        Args:
            record_ids: Selected record IDs
            roles: Optional role overrides
            categories: Optional category overrides
            allow_relink: If True, records already in a group are moved;
                a group left with a single member is dissolved

        Returns:
            The committed LinkResult

        Raises:
            ValidationError: If fewer than two records are selected
            NotFoundError: If a record doesn't exist
            ConflictError: If a record is already linked and relinking is not allowed
        """
        records = self.load_records(record_ids)
        if not allow_relink:
            linked = [record.id for record in records if record.link_group_id]
            if linked:
                raise ConflictError(
                    f"Record(s) already linked: {', '.join(str(i) for i in linked)}"
                )

        result = reconcile(
            records,
            roles=roles,
            record_types=self.db.list_record_types(),
            categories=categories,
        )
        previous_groups = {record.link_group_id for record in records if record.link_group_id}
        with self.db.transaction():
            for record in result.records:
                self.db.update_record(
                    record.id,
                    type_id=record.type_id,
                    category=record.category,
                    link_group_id=record.link_group_id,
                )
            for link_group_id in sorted(previous_groups):
                self._dissolve_if_orphaned(link_group_id)

        if result.balanced:
            logger.info(
                "Linked %d records into group %s", len(result.records), result.link_group_id
            )
        else:
            logger.info(
                "Linked %d records into group %s out of balance by %s",
                len(result.records),
                result.link_group_id,
                result.difference,
            )
        return result

    def get_group(self, link_group_id: str) -> list[PersistedRecord]:
        """Return the members of a link group."""
        return self.db.list_records(link_group_id=link_group_id)

    def unlink_group(self, link_group_id: str) -> int:
        """Clear the group ID from every member.

        Returns:
            Number of records unlinked

        Raises:
            NotFoundError: If the group has no members
        """
        members = self.get_group(link_group_id)
        if not members:
            raise NotFoundError(link_group_not_found(link_group_id))
        with self.db.transaction():
            for record in members:
                self.db.update_record(record.id, clear_link_group=True)
        return len(members)

    def _dissolve_if_orphaned(self, link_group_id: str) -> None:
        """Unlink what is left of a group that relinking shrank below two members."""
        remaining = self.get_group(link_group_id)
        if not remaining or len(remaining) >= 2:
            return
        for record in remaining:
            self.db.update_record(record.id, clear_link_group=True)
        logger.info(
            "Dissolved group %s: only record %s was left in it",
            link_group_id,
            ", ".join(str(record.id) for record in remaining),
        )
