"""SQLAlchemy models for finrecon database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    CheckConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class RecordType(Base):
    """Record type model carrying the balance effect."""

    __tablename__ = "record_types"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    balance_effect = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    records = relationship("Record", back_populates="record_type")


class Record(Base):
    """Ledger record model."""

    __tablename__ = "records"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False, default="")
    type_id = Column(Integer, ForeignKey("record_types.id"), nullable=False)
    category = Column(String, nullable=True)
    link_group_id = Column(String, nullable=True, index=True)
    parent_id = Column(Integer, ForeignKey("records.id"), nullable=True)
    source_id = Column(String, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Stored amounts are magnitudes; direction comes from the record type
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_record_amount_non_negative"),)

    # Relationships
    record_type = relationship("RecordType", back_populates="records")
    parent = relationship("Record", remote_side=[id], backref="children")


class ScheduledItem(Base):
    """Scheduled item model with its recurrence rule columns."""

    __tablename__ = "scheduled_items"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=True)
    description = Column(String, nullable=True)
    type_id = Column(Integer, ForeignKey("record_types.id"), nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    frequency = Column(String, nullable=False, default="none")
    interval = Column(Integer, nullable=False, default=1)
    end_date = Column(Date, nullable=True)
    by_month_day = Column(Integer, nullable=True)
    # Comma separated weekday numbers, e.g. "0,2,4"
    by_week_days = Column(String, nullable=True)
    # Set on items materialized from a projected occurrence of a recurring item
    source_item_id = Column(Integer, ForeignKey("scheduled_items.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
