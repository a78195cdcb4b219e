"""Domain layer for finrecon application.

Services that need a database live in their own modules
(``finrecon.domain.record``, ``finrecon.domain.linking``, ...) and are not
imported here, so the database layer can import the entities without a cycle.
"""

from finrecon.domain.signature import compute_signature
from finrecon.domain.conflicts import classify_batch
from finrecon.domain.recurrence import next_occurrence, validate_rule
from finrecon.domain.projection import materialized_dates, project_occurrences, occurrences_for_item
from finrecon.domain.calendar_index import build_day_index

__all__ = [
    "compute_signature",
    "classify_batch",
    "next_occurrence",
    "validate_rule",
    "project_occurrences",
    "occurrences_for_item",
    "materialized_dates",
    "build_day_index",
]
