"""Shared pytest fixtures for finrecon tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from finrecon.database.factories import create_sqlite_database
from finrecon.domain.entities import RawRecord
from finrecon.domain.import_session import ImportService
from finrecon.domain.linking import LinkService
from finrecon.domain.record import RecordService
from finrecon.domain.record_type import RecordTypeService
from finrecon.domain.schedule import ScheduleService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def record_type_service(temp_db):
    """Create a RecordTypeService with a temporary database."""
    return RecordTypeService(temp_db)


@pytest.fixture
def record_service(temp_db):
    """Create a RecordService with a temporary database."""
    return RecordService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create an ImportService with a temporary database."""
    return ImportService(temp_db)


@pytest.fixture
def link_service(temp_db):
    """Create a LinkService with a temporary database."""
    return LinkService(temp_db)


@pytest.fixture
def schedule_service(temp_db):
    """Create a ScheduleService with a temporary database."""
    return ScheduleService(temp_db)


@pytest.fixture
def record_types(record_type_service):
    """Initialize the default record types and return them by name."""
    from finrecon.cli.commands.init_types import INITIAL_RECORD_TYPES

    for name, effect in INITIAL_RECORD_TYPES:
        record_type_service.create_record_type(name=name, balance_effect=effect)

    return {rt.name: rt for rt in record_type_service.list_record_types()}


@pytest.fixture
def sample_records(record_service, record_types):
    """Create a small ledger: one transfer and two purchases."""
    purchase = record_types["Purchase"].id
    transfer = record_types["Transfer"].id
    return [
        record_service.create_record(
            date=date(2024, 1, 15),
            amount=Decimal("100.00"),
            type_id=transfer,
            description="Transfer to savings",
        ),
        record_service.create_record(
            date=date(2024, 1, 15),
            amount=Decimal("60.00"),
            type_id=purchase,
            description="Grocery Store",
        ),
        record_service.create_record(
            date=date(2024, 1, 16),
            amount=Decimal("40.00"),
            type_id=purchase,
            description="Hardware store",
        ),
    ]


@pytest.fixture
def make_raw():
    """Build raw records with sensible defaults."""

    def _make(day=date(2024, 1, 5), amount="-12.50", description="Coffee Shop", **kwargs):
        return RawRecord(date=day, amount=Decimal(amount), description=description, **kwargs)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temporary file and return its path."""

    def _write(content: str, name: str = "statement.csv") -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write
