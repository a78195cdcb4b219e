"""Content-derived signatures for duplicate detection."""

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from finrecon.domain.entities import PersistedRecord, RawRecord

CURRENCY_UNIT = Decimal("0.01")

_WHITESPACE = re.compile(r"\s+")


def normalize_description(description: str | None) -> str:
    """Lower-case a description and collapse internal whitespace."""
    if not description:
        return ""
    return _WHITESPACE.sub(" ", description).strip().lower()


def normalize_amount(amount: Decimal) -> Decimal:
    """Round an amount's magnitude to the smallest currency unit."""
    return abs(Decimal(amount)).quantize(CURRENCY_UNIT, rounding=ROUND_HALF_UP)


def compute_signature(record: Union[RawRecord, PersistedRecord]) -> str:
    """Compute the deduplication signature of a record.

    The signature only depends on the calendar date, the amount magnitude in
    cents and the normalized description. Identifiers are ignored because the
    same event arrives from different sources with different identifiers.

    Args:
        record: Raw or persisted record

    Returns:
        Signature string such as ``"2024-01-05|12.50|coffee shop"``
    """
    return "|".join(
        (
            record.date.isoformat(),
            str(normalize_amount(record.amount)),
            normalize_description(record.description),
        )
    )
