"""Tests for import batch classification."""

import logging
from datetime import date, datetime
from decimal import Decimal

from finrecon.domain.conflicts import build_signature_index, classify_batch
from finrecon.domain.entities import ConflictKind, PersistedRecord


def persisted(record_id, day, amount, description):
    return PersistedRecord(
        id=record_id,
        date=day,
        amount=Decimal(amount),
        description=description,
        type_id=1,
        category=None,
        link_group_id=None,
        parent_id=None,
        source_id=None,
        imported_at=datetime(2024, 1, 31),
    )


def test_new_records_are_included(make_raw):
    batch = [make_raw(description="Coffee"), make_raw(description="Bakery")]
    classified = classify_batch(batch, [])

    assert [item.conflict_kind for item in classified] == [ConflictKind.NONE, ConflictKind.NONE]
    assert not any(item.excluded for item in classified)


def test_database_conflict_is_excluded_by_default(make_raw):
    existing = [persisted(4, date(2024, 1, 5), "12.50", "Coffee Shop")]
    classified = classify_batch([make_raw()], existing)

    assert len(classified) == 1
    assert classified[0].conflict_kind == ConflictKind.DATABASE
    assert classified[0].excluded is True
    assert classified[0].matched_record_id == 4


def test_second_identical_row_is_batch_internal(make_raw):
    classified = classify_batch([make_raw(), make_raw()], [])

    assert classified[0].conflict_kind == ConflictKind.NONE
    assert classified[0].excluded is False
    assert classified[1].conflict_kind == ConflictKind.BATCH_INTERNAL
    assert classified[1].excluded is True


def test_database_conflict_takes_precedence_over_batch(make_raw):
    existing = [persisted(1, date(2024, 1, 5), "12.50", "Coffee Shop")]
    classified = classify_batch([make_raw(), make_raw()], existing)

    assert [item.conflict_kind for item in classified] == [
        ConflictKind.DATABASE,
        ConflictKind.DATABASE,
    ]


def test_zero_amount_rows_are_dropped(make_raw, caplog):
    batch = [make_raw(amount="0.00"), make_raw(amount="0.0004"), make_raw(amount="-3.00")]
    with caplog.at_level(logging.DEBUG, logger="finrecon.domain.conflicts"):
        classified = classify_batch(batch, [])

    assert len(classified) == 1
    assert classified[0].record.amount == Decimal("-3.00")
    assert "Dropped 2 zero-amount" in caplog.text


def test_order_is_preserved(make_raw):
    batch = [make_raw(description=f"Item {i}") for i in range(5)]
    classified = classify_batch(batch, [])
    assert [item.record.description for item in classified] == [f"Item {i}" for i in range(5)]


def test_user_override_is_kept(make_raw):
    classified = classify_batch([make_raw(), make_raw()], [])
    overridden = classified[1].with_excluded(False)

    assert overridden.excluded is False
    assert overridden.conflict_kind == ConflictKind.BATCH_INTERNAL
    # Original is a frozen value and stays untouched
    assert classified[1].excluded is True


def test_empty_batch():
    assert classify_batch([], [persisted(1, date(2024, 1, 1), "5", "x")]) == []


def test_signature_index_keeps_first_record_id():
    existing = [
        persisted(1, date(2024, 1, 5), "12.50", "Coffee Shop"),
        persisted(2, date(2024, 1, 5), "12.50", "coffee shop"),
    ]
    assert build_signature_index(existing) == {"2024-01-05|12.50|coffee shop": 1}
