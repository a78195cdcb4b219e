"""Tests for link groups."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from finrecon.domain.entities import BalanceEffect, LinkRole, PersistedRecord, RecordType
from finrecon.domain.errors import ConflictError, NotFoundError, ValidationError
from finrecon.domain.linking import check_balance, reconcile, suggest_roles

TYPES = [
    RecordType(id=1, name="Purchase", balance_effect=BalanceEffect.EXPENSE, created_at=datetime(2024, 1, 1)),
    RecordType(id=2, name="Transfer", balance_effect=BalanceEffect.TRANSFER, created_at=datetime(2024, 1, 1)),
    RecordType(id=3, name="Paycheck", balance_effect=BalanceEffect.INCOME, created_at=datetime(2024, 1, 1)),
]


def record(record_id, amount, type_id=1, category=None):
    return PersistedRecord(
        id=record_id,
        date=date(2024, 1, 15),
        amount=Decimal(amount),
        description=f"Record {record_id}",
        type_id=type_id,
        category=category,
        link_group_id=None,
        parent_id=None,
        source_id=None,
        imported_at=datetime(2024, 1, 16),
    )


class TestSuggestRoles:
    def test_largest_amount_is_source(self):
        roles = suggest_roles([record(1, "60"), record(2, "100"), record(3, "40")])
        assert roles == {1: LinkRole.ALLOCATION, 2: LinkRole.SOURCE, 3: LinkRole.ALLOCATION}

    def test_tie_goes_to_first_record(self):
        roles = suggest_roles([record(1, "50"), record(2, "50")])
        assert roles[1] == LinkRole.SOURCE
        assert roles[2] == LinkRole.ALLOCATION

    def test_empty(self):
        assert suggest_roles([]) == {}


class TestCheckBalance:
    def test_balanced(self):
        records = [record(1, "100"), record(2, "60"), record(3, "40")]
        roles = {1: LinkRole.SOURCE, 2: LinkRole.ALLOCATION, 3: LinkRole.ALLOCATION}
        balance = check_balance(records, roles)

        assert balance.balanced
        assert balance.difference == Decimal("0")
        assert balance.source_total == Decimal("100")
        assert balance.allocation_total == Decimal("100")

    def test_within_tolerance(self):
        balance = check_balance(
            [record(1, "100.00"), record(2, "99.995")],
            {1: LinkRole.SOURCE, 2: LinkRole.ALLOCATION},
        )
        assert balance.balanced

    def test_out_of_balance_difference_is_signed(self):
        balance = check_balance(
            [record(1, "100"), record(2, "75")],
            {1: LinkRole.SOURCE, 2: LinkRole.ALLOCATION},
        )
        assert not balance.balanced
        assert balance.difference == Decimal("25")

        over = check_balance(
            [record(1, "100"), record(2, "130")],
            {1: LinkRole.SOURCE, 2: LinkRole.ALLOCATION},
        )
        assert over.difference == Decimal("-30")


class TestReconcile:
    def test_source_equal_to_allocations_is_balanced(self):
        result = reconcile([record(1, "100"), record(2, "60"), record(3, "40")], record_types=TYPES)

        assert result.balanced
        assert result.difference == Decimal("0")
        assert len({r.link_group_id for r in result.records}) == 1
        assert result.records[0].link_group_id == result.link_group_id

    def test_source_is_retyped_to_transfer(self):
        result = reconcile([record(1, "100"), record(2, "100", type_id=2)], record_types=TYPES)

        by_id = {r.id: r for r in result.records}
        assert result.roles[1] == LinkRole.SOURCE
        assert by_id[1].type_id == 2
        # An allocation typed as a transfer becomes the default expense type
        assert by_id[2].type_id == 1

    def test_allocation_keeps_non_transfer_type(self):
        result = reconcile([record(1, "100"), record(2, "100", type_id=3)], record_types=TYPES)
        assert {r.id: r for r in result.records}[2].type_id == 3

    def test_role_override(self):
        result = reconcile(
            [record(1, "100"), record(2, "40")],
            roles={2: LinkRole.SOURCE, 1: LinkRole.ALLOCATION},
        )
        assert result.roles == {1: LinkRole.ALLOCATION, 2: LinkRole.SOURCE}
        assert not result.balanced
        assert result.difference == Decimal("-60")

    def test_category_override(self):
        result = reconcile(
            [record(1, "100", category="Old"), record(2, "100")],
            categories={2: "Savings"},
        )
        by_id = {r.id: r for r in result.records}
        assert by_id[1].category == "Old"
        assert by_id[2].category == "Savings"

    def test_explicit_group_id(self):
        result = reconcile([record(1, "5"), record(2, "5")], link_group_id="group-1")
        assert result.link_group_id == "group-1"

    def test_explicit_allocation_is_retyped_to_expense(self):
        result = reconcile(
            [record(1, "100", type_id=3), record(2, "100", type_id=3)],
            roles={1: LinkRole.ALLOCATION, 2: LinkRole.SOURCE},
            record_types=TYPES,
        )

        by_id = {r.id: r for r in result.records}
        assert by_id[1].type_id == 1
        assert by_id[2].type_id == 2

    def test_explicit_allocation_keeps_expense_type(self):
        types = [*TYPES, RecordType(id=4, name="Bill Payment", balance_effect=BalanceEffect.EXPENSE, created_at=datetime(2024, 1, 1))]
        result = reconcile(
            [record(1, "100"), record(2, "100", type_id=4)],
            roles={2: LinkRole.ALLOCATION},
            record_types=types,
        )
        assert {r.id: r for r in result.records}[2].type_id == 4

    def test_input_is_not_mutated(self):
        original = [record(1, "100"), record(2, "100")]
        reconcile(original, record_types=TYPES)
        assert original[0].link_group_id is None

    @pytest.mark.parametrize("count", [0, 1])
    def test_too_few_records(self, count):
        with pytest.raises(ValidationError, match="At least 2 records"):
            reconcile([record(i, "10") for i in range(count)])

    def test_duplicate_selection(self):
        with pytest.raises(ValidationError, match="only be selected once"):
            reconcile([record(1, "10"), record(1, "10")])

    def test_override_for_unselected_record(self):
        with pytest.raises(ValidationError, match="unselected"):
            reconcile([record(1, "10"), record(2, "10")], roles={9: LinkRole.SOURCE})


class TestLinkService:
    def test_link_persists_group(self, link_service, record_service, sample_records):
        result = link_service.link_records(sample_records)

        assert result.balanced
        for record_id in sample_records:
            assert record_service.get_record(record_id).link_group_id == result.link_group_id
        assert [r.id for r in link_service.get_group(result.link_group_id)] == sample_records

    def test_link_retypes_persisted_records(self, link_service, record_service, record_types, sample_records):
        transfer_id, grocery_id, _ = sample_records
        link_service.link_records(sample_records)

        assert record_service.get_record(transfer_id).type_id == record_types["Transfer"].id
        assert record_service.get_record(grocery_id).type_id == record_types["Purchase"].id

    def test_out_of_balance_is_saved_and_logged(self, link_service, sample_records, caplog):
        with caplog.at_level(logging.INFO, logger="finrecon.domain.linking"):
            result = link_service.link_records(sample_records[:2])

        assert not result.balanced
        assert result.difference == Decimal("40")
        assert "out of balance" in caplog.text

    def test_preview_does_not_persist(self, link_service, record_service, sample_records):
        result = link_service.preview(sample_records)
        assert result.balanced
        assert record_service.get_record(sample_records[0]).link_group_id is None

    def test_already_linked_records_conflict(self, link_service, sample_records):
        link_service.link_records(sample_records[:2])
        with pytest.raises(ConflictError, match="already linked"):
            link_service.link_records(sample_records[1:])

    def test_relink_moves_records(self, link_service, record_service, sample_records):
        first = link_service.link_records(sample_records[:2])
        second = link_service.link_records(sample_records, allow_relink=True)

        assert second.link_group_id != first.link_group_id
        assert link_service.get_group(first.link_group_id) == []

    def test_relink_dissolves_group_left_with_one_record(self, link_service, record_service, sample_records):
        transfer_id, grocery_id, hardware_id = sample_records
        first = link_service.link_records([transfer_id, grocery_id])
        second = link_service.link_records([transfer_id, hardware_id], allow_relink=True)

        assert link_service.get_group(first.link_group_id) == []
        assert record_service.get_record(grocery_id).link_group_id is None
        assert [r.id for r in link_service.get_group(second.link_group_id)] == [transfer_id, hardware_id]

    def test_relink_keeps_group_with_two_records_left(self, link_service, record_service, record_types):
        purchase = record_types["Purchase"].id
        ids = [
            record_service.create_record(date=date(2024, 1, 15), amount=Decimal(amount), type_id=purchase)
            for amount in ("30", "20", "10", "5")
        ]
        first = link_service.link_records(ids[:3])
        link_service.link_records([ids[0], ids[3]], allow_relink=True)

        assert [r.id for r in link_service.get_group(first.link_group_id)] == ids[1:3]

    def test_failed_link_leaves_no_partial_group(self, link_service, record_service, sample_records, monkeypatch):
        db = link_service.db
        update_record = db.update_record
        calls = []

        def failing_update(record_id, **kwargs):
            calls.append(record_id)
            if len(calls) == 2:
                raise ValueError("disk full")
            update_record(record_id, **kwargs)

        monkeypatch.setattr(db, "update_record", failing_update)
        with pytest.raises(ValueError, match="disk full"):
            link_service.link_records(sample_records)
        monkeypatch.undo()

        for record_id in sample_records:
            assert record_service.get_record(record_id).link_group_id is None

    def test_missing_record(self, link_service, sample_records):
        with pytest.raises(NotFoundError, match="Record 999 not found"):
            link_service.link_records([sample_records[0], 999])

    def test_single_record(self, link_service, sample_records):
        with pytest.raises(ValidationError):
            link_service.link_records(sample_records[:1])

    def test_unlink_clears_group(self, link_service, record_service, sample_records):
        result = link_service.link_records(sample_records)
        assert link_service.unlink_group(result.link_group_id) == 3

        for record_id in sample_records:
            assert record_service.get_record(record_id).link_group_id is None

    def test_unlink_unknown_group(self, link_service):
        with pytest.raises(NotFoundError):
            link_service.unlink_group("no-such-group")
