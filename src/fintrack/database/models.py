"""SQLAlchemy models for fintrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Account model.

    The balance shown to users is not stored; it is derived from the
    account's transactions whenever accounts are read.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    currency = Column(String(8), nullable=False)
    initial_balance = Column(Numeric(14, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # DPS configuration lives on the primary account only
    has_dps = Column(Boolean, nullable=False, default=False)
    dps_type = Column(String, nullable=True)
    dps_amount_type = Column(String, nullable=True)
    dps_fixed_amount = Column(Numeric(14, 2), nullable=True)
    dps_savings_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(String(8), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    date = Column(Date, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    donation_amount = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")


class Purchase(Base):
    """Purchase model."""

    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True)
    item_name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    price = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(8), nullable=False)
    purchase_date = Column(Date, nullable=False)
    status = Column(String, nullable=False)
    priority = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    transaction_id = Column(String(8), nullable=True, index=True)
    exclude_from_calculation = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class Category(Base):
    """Income or expense category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    color = Column(String, nullable=False, default="#3B82F6")
    currency = Column(String(8), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("name", "type", name="uq_category_name_type"),)


class SavingsGoal(Base):
    """Savings goal model. The savings account is created with the goal."""

    __tablename__ = "savings_goals"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    target_amount = Column(Numeric(14, 2), nullable=False)
    current_amount = Column(Numeric(14, 2), nullable=False, default=0)
    source_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    savings_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class LendBorrow(Base):
    """Lend and borrow records, kept apart from account balances."""

    __tablename__ = "lend_borrow"

    id = Column(Integer, primary_key=True)
    type = Column(String, nullable=False)
    person_name = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(8), nullable=False)
    due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    partial_return_amount = Column(Numeric(14, 2), nullable=False, default=0)
    partial_return_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class DPSClosure(Base):
    """Journal of DPS closures, one row per closure."""

    __tablename__ = "dps_closures"

    id = Column(Integer, primary_key=True)
    primary_account_id = Column(Integer, nullable=False)
    subaccount_id = Column(Integer, nullable=False)
    subaccount_name = Column(String, nullable=False)
    currency = Column(String(8), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    state = Column(String, nullable=False)
    destination = Column(String, nullable=True)
    destination_account_id = Column(Integer, nullable=True)
    transfer_transaction_id = Column(String(8), nullable=True)
    failed_step = Column(String, nullable=True)
    error = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
