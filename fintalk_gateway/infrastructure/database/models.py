"""SQLAlchemy ORM models for the ledger tables"""

import uuid
from sqlalchemy import CheckConstraint, Column, Date, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransactionRecord(Base):
    """Expense or income entry"""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="BDT")
    category = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    type = Column(String(20), nullable=False)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("type IN ('expense', 'income')", name="ck_transactions_type"),
        CheckConstraint("amount >= 0", name="ck_transactions_amount"),
        Index("idx_transactions_user_date", "user_id", "date"),
    )


class LoanRecord(Base):
    """Loan taken from a bank or a person"""

    __tablename__ = "loans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    lender_name = Column(String(255), nullable=False)
    loan_type = Column(String(20), nullable=False)
    principal_amount = Column(Numeric(15, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False, default=0)
    tenure_months = Column(Integer, nullable=True)
    monthly_installment = Column(Numeric(15, 2), nullable=True)
    total_paid = Column(Numeric(15, 2), nullable=False, default=0)
    remaining_balance = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="BDT")
    status = Column(String(20), nullable=False, default="active")
    start_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("loan_type IN ('bank', 'personal')", name="ck_loans_type"),
        CheckConstraint("status IN ('active', 'paid_off')", name="ck_loans_status"),
        Index("idx_loans_user_status", "user_id", "status"),
    )


class FeedbackRecord(Base):
    """Star rating and comment left by a user"""

    __tablename__ = "feedback"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_feedback_rating"),
    )
