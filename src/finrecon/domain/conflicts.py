"""Classification of an import batch against itself and the existing ledger."""

import logging
from decimal import Decimal
from typing import Iterable, Sequence

from finrecon.domain.entities import (
    ClassifiedRecord,
    ConflictKind,
    PersistedRecord,
    RawRecord,
)
from finrecon.domain.signature import compute_signature

logger = logging.getLogger(__name__)

# Rows below this magnitude come from malformed source lines.
ZERO_AMOUNT_EPSILON = Decimal("0.001")


def build_signature_index(existing: Iterable[PersistedRecord]) -> dict[str, int]:
    """Map each signature of the existing ledger to its first record ID."""
    index: dict[str, int] = {}
    for record in existing:
        index.setdefault(compute_signature(record), record.id)
    return index


def classify_batch(
    batch: Sequence[RawRecord],
    existing: Iterable[PersistedRecord],
    epsilon: Decimal = ZERO_AMOUNT_EPSILON,
) -> list[ClassifiedRecord]:
    """Tag each raw record as new, a batch duplicate or already in the ledger.

    Records already in the ledger and repeated rows of the batch default to
    excluded; the flag stays overridable through
    :meth:`ClassifiedRecord.with_excluded`. Input order is preserved.

    Args:
        batch: Raw records from one import session
        existing: Snapshot of the persisted ledger
        epsilon: Magnitude below which a row is treated as noise and dropped

    Returns:
        List of classified records in input order
    """
    existing_index = build_signature_index(existing)
    seen_in_batch: set[str] = set()
    classified: list[ClassifiedRecord] = []
    dropped = 0

    for record in batch:
        if abs(record.amount) < epsilon:
            dropped += 1
            continue

        signature = compute_signature(record)
        if signature in existing_index:
            item = ClassifiedRecord(
                record=record,
                signature=signature,
                conflict_kind=ConflictKind.DATABASE,
                excluded=True,
                matched_record_id=existing_index[signature],
            )
        elif signature in seen_in_batch:
            item = ClassifiedRecord(
                record=record,
                signature=signature,
                conflict_kind=ConflictKind.BATCH_INTERNAL,
                excluded=True,
            )
        else:
            item = ClassifiedRecord(
                record=record,
                signature=signature,
                conflict_kind=ConflictKind.NONE,
                excluded=False,
            )
        seen_in_batch.add(signature)
        classified.append(item)

    if dropped:
        logger.debug("Dropped %d zero-amount row(s) from import batch", dropped)
    return classified
