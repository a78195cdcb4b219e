"""Domain model entities for finrecon.

These are pure data classes representing business concepts, independent of
database schema. Persisted entities are produced by the database mappers;
projected occurrences are produced by the schedule projector and never reach
the database.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Union


class BalanceEffect(str, Enum):
    """Direction a record type imposes on net worth."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    DONATION = "donation"
    TAX = "tax"
    OTHER = "other"


class Frequency(str, Enum):
    """Recurrence frequencies supported by a RecurrenceRule."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ConflictKind(str, Enum):
    """Classification of a raw record relative to existing data."""

    NONE = "none"
    DATABASE = "database"
    BATCH_INTERNAL = "batch_internal"


class LinkRole(str, Enum):
    """Role of a record inside a link group."""

    SOURCE = "transfer"
    ALLOCATION = "expense"


@dataclass(frozen=True)
class RecordType:
    """Record type domain entity."""

    id: int
    name: str
    balance_effect: BalanceEffect
    created_at: datetime


@dataclass(frozen=True)
class RawRecord:
    """A record parsed from an import source, before acceptance."""

    date: date
    amount: Decimal
    description: str
    source_id: Optional[str] = None
    metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PersistedRecord:
    """Ledger record domain entity.

    ``amount`` is always a non-negative magnitude; the direction comes from
    the balance effect of ``type_id``.
    """

    id: int
    date: date
    amount: Decimal
    description: str
    type_id: int
    category: Optional[str]
    link_group_id: Optional[str]
    parent_id: Optional[int]
    source_id: Optional[str]
    imported_at: datetime


@dataclass(frozen=True)
class RecurrenceRule:
    """How a scheduled item repeats.

    ``by_month_day`` only applies to monthly rules (-1 means the last day of
    the month). ``by_week_days`` only applies to weekly rules (0=Monday).
    """

    frequency: Frequency = Frequency.NONE
    interval: int = 1
    end_date: Optional[date] = None
    by_month_day: Optional[int] = None
    by_week_days: tuple[int, ...] = ()


@dataclass(frozen=True)
class ScheduledItem:
    """A task or scheduled template anchored on a date, optionally recurring."""

    id: int
    title: str
    date: date
    rule: RecurrenceRule
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    type_id: Optional[int] = None
    is_completed: bool = False
    source_item_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class RealOccurrence:
    """Occurrence backed by a stored scheduled item."""

    item: ScheduledItem

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def date(self) -> date:
        return self.item.date

    @property
    def is_projected(self) -> bool:
        return False


@dataclass(frozen=True)
class ProjectedOccurrence:
    """Computed future instance of a recurring scheduled item.

    Never persisted. ``item`` is a copy of the source item with the date
    replaced and completion reset; it still carries the source item's id, so
    edits must go through materialization rather than an update of ``item``.
    """

    id: str
    source_id: int
    date: date
    item: ScheduledItem

    @property
    def is_projected(self) -> bool:
        return True


Occurrence = Union[RealOccurrence, ProjectedOccurrence]


@dataclass(frozen=True)
class ClassifiedRecord:
    """A raw record tagged with its conflict classification."""

    record: RawRecord
    signature: str
    conflict_kind: ConflictKind
    excluded: bool
    matched_record_id: Optional[int] = None

    def with_excluded(self, excluded: bool) -> "ClassifiedRecord":
        """Return a copy with the exclusion flag overridden by the user."""
        return replace(self, excluded=excluded)


@dataclass(frozen=True)
class BalanceCheck:
    """Outcome of comparing source and allocation totals of a link group."""

    source_total: Decimal
    allocation_total: Decimal
    difference: Decimal
    balanced: bool


@dataclass(frozen=True)
class LinkResult:
    """Records of a link group ready to persist, with their balance status."""

    link_group_id: str
    records: tuple[PersistedRecord, ...]
    roles: Mapping[int, LinkRole]
    balance: BalanceCheck

    @property
    def balanced(self) -> bool:
        return self.balance.balanced

    @property
    def difference(self) -> Decimal:
        return self.balance.difference


@dataclass(frozen=True)
class DayEntry:
    """Everything shown on one calendar day."""

    day: date
    records: tuple[PersistedRecord, ...]
    occurrences: tuple[Occurrence, ...]
    totals: Mapping[BalanceEffect, Decimal]


@dataclass(frozen=True)
class ImportOutcome:
    """Counts returned after accepting a classified batch."""

    imported: int
    skipped: int
    record_ids: tuple[int, ...]
