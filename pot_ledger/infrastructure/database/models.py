"""SQLAlchemy ORM models for pots, expenses and the settlement log"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class PotRecord(Base):
    """Group of members sharing expenses (e.g. a trip)"""

    __tablename__ = "pot"

    id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    currency = Column(String(3), nullable=False)
    created_by = Column(String(64), nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    members = relationship("PotMemberRecord", back_populates="pot", cascade="all, delete-orphan")
    expenses = relationship("ExpenseRecord", back_populates="pot", cascade="all, delete-orphan")
    settlements = relationship("SettlementRecord", back_populates="pot", cascade="all, delete-orphan")


class PotMemberRecord(Base):
    """Membership of one member in one pot"""

    __tablename__ = "pot_member"

    pot_id = Column(String(36), ForeignKey("pot.id", ondelete="CASCADE"), primary_key=True)
    member_id = Column(String(64), primary_key=True)
    display_name = Column(Text, nullable=False)
    preferred_currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    pot = relationship("PotRecord", back_populates="members")


class ExpenseRecord(Base):
    """Expense paid by one member and split among several"""

    __tablename__ = "expense"

    id = Column(String(36), primary_key=True)
    pot_id = Column(String(36), ForeignKey("pot.id", ondelete="CASCADE"), nullable=False, index=True)
    payer_id = Column(String(64), nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=True)
    expense_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    pot = relationship("PotRecord", back_populates="expenses")
    splits = relationship(
        "ExpenseSplitRecord",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplitRecord.position",
    )


class ExpenseSplitRecord(Base):
    """Share of an expense owed by one member"""

    __tablename__ = "expense_split"

    id = Column(Integer, primary_key=True, autoincrement=True)
    expense_id = Column(String(36), ForeignKey("expense.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    member_id = Column(String(64), nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    is_equal_split = Column(Boolean, nullable=False, default=False)
    percentage = Column(Numeric(7, 4), nullable=True)

    expense = relationship("ExpenseRecord", back_populates="splits")


class SettlementRecord(Base):
    """Recorded payment; rows are only ever inserted"""

    __tablename__ = "settlement"

    id = Column(String(36), primary_key=True)
    pot_id = Column(String(36), ForeignKey("pot.id", ondelete="CASCADE"), nullable=False, index=True)
    from_member_id = Column(String(64), nullable=False)
    to_member_id = Column(String(64), nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    payment_method = Column(Text, nullable=True)
    confirmation_id = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    pot = relationship("PotRecord", back_populates="settlements")
