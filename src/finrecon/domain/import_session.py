"""Import session domain service: parse, classify and accept raw records."""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from finrecon.database.base import Database
from finrecon.domain.conflicts import (
    ZERO_AMOUNT_EPSILON,
    build_signature_index,
    classify_batch,
)
from finrecon.domain.entities import (
    BalanceEffect,
    ClassifiedRecord,
    ConflictKind,
    ImportOutcome,
    RawRecord,
)
from finrecon.domain.errors import ValidationError
from finrecon.domain.record import RecordService
from finrecon.domain.record_type import RecordTypeService
from finrecon.domain.signature import normalize_amount
from finrecon.utils.amount_parser import parse_amount
from finrecon.utils.date_parser import parse_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMap:
    """Names of the source columns holding each raw record field."""

    date: str = "Date"
    amount: str = "Amount"
    description: str = "Description"
    source_id: Optional[str] = None

    def required(self) -> set[str]:
        return {self.date, self.amount, self.description}

    def known(self) -> set[str]:
        columns = self.required()
        if self.source_id:
            columns.add(self.source_id)
        return columns


class ImportService:
    """Service for turning raw source rows into ledger records."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.record_service = RecordService(db)
        self.type_service = RecordTypeService(db)

    def read_csv_rows(self, csv_file_path: str) -> list[dict[str, str]]:
        """Read a CSV file into flat rows.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file has no header row
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            # Try to detect delimiter
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValidationError("CSV file has no columns")
            return [dict(row) for row in reader]

    def parse_rows(
        self, rows: Iterable[Mapping[str, Any]], columns: ColumnMap = ColumnMap()
    ) -> tuple[list[RawRecord], list[str]]:
        """Parse flat rows into raw records.

        Row-level problems are collected, not raised, so one bad line does not
        abort the import. Columns outside the mapping are kept as metadata.

        Args:
            rows: Flat key-valued rows (e.g. from :meth:`read_csv_rows`)
            columns: Column names for each field

        Returns:
            Tuple of (raw records, error messages)
        """
        records: list[RawRecord] = []
        errors: list[str] = []

        # Start at 2 (header is row 1)
        for row_num, row in enumerate(rows, start=2):
            values = {
                key: (str(value).strip() if value is not None else "")
                for key, value in row.items()
                if key is not None
            }

            missing = [column for column in (columns.date, columns.amount) if not values.get(column)]
            if missing:
                errors.append(f"Row {row_num}: Missing {', '.join(missing)}")
                continue

            try:
                record_date = parse_date(values[columns.date])
                amount = parse_amount(values[columns.amount])
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")
                continue

            source_id = values.get(columns.source_id) if columns.source_id else None
            metadata = {
                key: value for key, value in values.items() if key not in columns.known()
            }
            records.append(
                RawRecord(
                    date=record_date,
                    amount=amount,
                    description=values.get(columns.description, ""),
                    source_id=source_id or None,
                    metadata=metadata,
                )
            )

        return records, errors

    def classify(self, batch: Sequence[RawRecord]) -> list[ClassifiedRecord]:
        """Classify a batch against the current ledger snapshot."""
        classified = classify_batch(batch, self.db.list_records(), ZERO_AMOUNT_EPSILON)
        conflicts = sum(1 for item in classified if item.conflict_kind != ConflictKind.NONE)
        logger.info(
            "Classified %d of %d raw record(s), %d possible duplicate(s)",
            len(classified),
            len(batch),
            conflicts,
        )
        return classified

    def accept(
        self,
        classified: Sequence[ClassifiedRecord],
        expense_type_id: Optional[int] = None,
        income_type_id: Optional[int] = None,
    ) -> ImportOutcome:
        """Persist every record the user left included.

        Negative raw amounts become expenses and positive ones income, stored
        as magnitudes. Records classified as new are checked again against a
        fresh ledger snapshot so a concurrent import cannot insert them twice;
        conflicts the user explicitly included are imported as asked.

        Args:
            classified: Output of :meth:`classify`, possibly with user overrides
            expense_type_id: Type for negative amounts (default: first expense type)
            income_type_id: Type for positive amounts (default: first income type)

        Returns:
            ImportOutcome with counts and created record IDs
        """
        included = [item for item in classified if not item.excluded]
        skipped = len(classified) - len(included)
        if not included:
            return ImportOutcome(imported=0, skipped=skipped, record_ids=())

        if expense_type_id is None and any(item.record.amount < 0 for item in included):
            expense_type_id = self.type_service.require_default_for_effect(
                BalanceEffect.EXPENSE
            ).id
        if income_type_id is None and any(item.record.amount >= 0 for item in included):
            income_type_id = self.type_service.require_default_for_effect(
                BalanceEffect.INCOME
            ).id

        current_index = build_signature_index(self.db.list_records())
        record_ids = []
        with self.db.transaction():
            for item in included:
                if item.conflict_kind == ConflictKind.NONE and item.signature in current_index:
                    logger.warning(
                        "Skipping %s: record %s was added since the batch was classified",
                        item.signature,
                        current_index[item.signature],
                    )
                    skipped += 1
                    continue

                raw = item.record
                type_id = expense_type_id if raw.amount < 0 else income_type_id
                record_ids.append(
                    self.record_service.create_record(
                        date=raw.date,
                        amount=normalize_amount(raw.amount),
                        type_id=type_id,
                        description=raw.description,
                        source_id=raw.source_id,
                    )
                )

        logger.info("Imported %d record(s), skipped %d", len(record_ids), skipped)
        return ImportOutcome(
            imported=len(record_ids), skipped=skipped, record_ids=tuple(record_ids)
        )

    def import_csv(
        self,
        csv_file_path: str,
        columns: ColumnMap = ColumnMap(),
        include_duplicates: bool = False,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        """Read, classify and accept a CSV file in one step.

        Args:
            csv_file_path: Path to CSV file
            columns: Column names for each field
            include_duplicates: If True, override every default exclusion
            dry_run: If True, classify only and persist nothing

        Returns:
            Dict with import statistics:
            - imported: number of records imported
            - skipped: number of records left out
            - dropped: number of zero-amount rows ignored
            - errors: list of row error messages
            - classified: list of ClassifiedRecord

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValidationError: If required columns are missing
        """
        rows = self.read_csv_rows(csv_file_path)
        if rows:
            missing_columns = sorted(columns.required() - set(rows[0]))
            if missing_columns:
                raise ValidationError(
                    f"CSV file missing required columns: {', '.join(missing_columns)}"
                )

        raw_records, errors = self.parse_rows(rows, columns)
        classified = self.classify(raw_records)
        if include_duplicates:
            classified = [item.with_excluded(False) for item in classified]

        dropped = len(raw_records) - len(classified)
        if dry_run:
            outcome = ImportOutcome(
                imported=0,
                skipped=sum(1 for item in classified if item.excluded),
                record_ids=(),
            )
        else:
            outcome = self.accept(classified)

        return {
            "imported": outcome.imported,
            "skipped": outcome.skipped,
            "dropped": dropped,
            "errors": errors,
            "classified": classified,
        }
