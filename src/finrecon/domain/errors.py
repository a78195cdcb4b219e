"""Shared domain error messages and error types."""

from datetime import date


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a record that is already linked or split."""


def record_not_found(record_id: int) -> str:
    """Return message for missing record."""
    return f"Record {record_id} not found"


def record_type_not_found(type_ref: int | str) -> str:
    """Return message for missing record type by ID or name."""
    if isinstance(type_ref, int):
        return f"Record type {type_ref} not found"
    return f"Record type '{type_ref}' not found"


def scheduled_item_not_found(item_id: int) -> str:
    """Return message for missing scheduled item."""
    return f"Scheduled item {item_id} not found"


def link_group_not_found(link_group_id: str) -> str:
    """Return message for a link group with no members."""
    return f"Link group '{link_group_id}' not found"


def too_few_link_members(count: int) -> str:
    """Return message when a link would contain fewer than two records."""
    return (
        f"At least 2 records are required to create a link group, got {count}"
    )


def invalid_window(window_start: date, window_end: date) -> str:
    """Return message for a window whose end precedes its start."""
    return f"Window end {window_end} is before window start {window_start}"
