"""SQLAlchemy models for the fincontrol database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def new_id() -> str:
    """Generate a primary key for a new row."""
    return str(uuid.uuid4())


class Bank(Base):
    """Bank model."""

    __tablename__ = "banks"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    wallets = relationship("Wallet", back_populates="bank")


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class CostCenter(Base):
    """Cost center model."""

    __tablename__ = "cost_centers"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Participant(Base):
    """Participant model."""

    __tablename__ = "participants"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Wallet(Base):
    """Wallet model, optionally tied to a bank."""

    __tablename__ = "wallets"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    bank_id = Column(String(36), ForeignKey("banks.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    bank = relationship("Bank", back_populates="wallets")


class Transaction(Base):
    """Transaction model.

    Foreign keys are nullable; the domain uses an empty string for
    "unassigned" and the mappers translate between the two.
    """

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    doc_number = Column(String, nullable=True)
    value = Column(Numeric(14, 2), nullable=False)
    type = Column(String(6), nullable=False)
    status = Column(String(7), nullable=False)
    bank_id = Column(String(36), ForeignKey("banks.id"), nullable=True)
    wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    cost_center_id = Column(String(36), ForeignKey("cost_centers.id"), nullable=True)
    participant_id = Column(String(36), ForeignKey("participants.id"), nullable=True)
    linked_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_transactions_date", "date"),
        Index("ix_transactions_linked_id", "linked_id"),
    )


REGISTRY_MODELS = {
    "banks": Bank,
    "categories": Category,
    "cost_centers": CostCenter,
    "participants": Participant,
    "wallets": Wallet,
}

# Transaction column referencing each registry table
REFERENCE_COLUMNS = {
    "banks": Transaction.bank_id,
    "categories": Transaction.category_id,
    "cost_centers": Transaction.cost_center_id,
    "participants": Transaction.participant_id,
    "wallets": Transaction.wallet_id,
}


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
