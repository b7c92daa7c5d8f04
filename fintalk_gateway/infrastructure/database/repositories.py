"""Data access layer for ledger entities

Every query filters on the owning user_id so one user can never read or
mutate another user's rows through these repositories.
"""

import uuid
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fintalk_gateway.domain.exceptions import LoanUpdateConflictError, StoreError
from fintalk_gateway.domain.models import (
    CategoryTotals,
    Loan,
    LoanStatus,
    LedgerSummary,
    NewLoanIntent,
    TransactionKind,
)
from fintalk_gateway.infrastructure.database.models import FeedbackRecord, LoanRecord, TransactionRecord

Q2 = Decimal("0.01")


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as StoreError"""
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreError(f"{operation} failed: {e}") from e


def _dec(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Q2)


def _like_pattern(fragment: str) -> str:
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def to_loan(record: LoanRecord) -> Loan:
    """Detach a loan row into an immutable domain snapshot"""
    return Loan(
        id=record.id,
        user_id=record.user_id,
        lender_name=record.lender_name,
        loan_type=record.loan_type,
        principal_amount=_dec(record.principal_amount),
        interest_rate=_dec(record.interest_rate),
        tenure_months=record.tenure_months,
        monthly_installment=_dec(record.monthly_installment) if record.monthly_installment is not None else None,
        total_paid=_dec(record.total_paid),
        remaining_balance=_dec(record.remaining_balance),
        currency=record.currency,
        status=LoanStatus(record.status),
        start_date=record.start_date,
        notes=record.notes,
        created_at=record.created_at,
    )


class TransactionRepository:
    """Repository for expense and income transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        user_id: str,
        amount: Decimal,
        currency: str,
        category: str,
        notes: Optional[str],
        kind: TransactionKind,
        on: date,
    ) -> TransactionRecord:
        """Insert a transaction and flush to obtain its id"""
        record = TransactionRecord(
            user_id=user_id,
            amount=amount,
            currency=currency,
            category=category,
            notes=notes,
            type=kind.value,
            date=on,
        )
        with store_errors("insert transaction"):
            self.db.add(record)
            self.db.flush()
        return record

    def list_for_user(self, user_id: str, limit: int = 100) -> List[TransactionRecord]:
        """Newest first: by date, then by creation time"""
        with store_errors("list transactions"):
            return list(
                self.db.execute(
                    select(TransactionRecord)
                    .where(TransactionRecord.user_id == user_id)
                    .order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc())
                    .limit(limit)
                )
                .scalars()
                .all()
            )

    def delete_for_user(self, user_id: str, transaction_id: uuid.UUID) -> bool:
        """Delete one of the user's transactions; False when no such row"""
        with store_errors("delete transaction"):
            result = self.db.execute(
                delete(TransactionRecord).where(
                    TransactionRecord.id == transaction_id,
                    TransactionRecord.user_id == user_id,
                )
            )
        return result.rowcount > 0

    def summarize_for_user(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> LedgerSummary:
        """Totals by kind and by category, optionally bounded by date (inclusive)"""
        query = (
            select(TransactionRecord.type, TransactionRecord.category, func.sum(TransactionRecord.amount))
            .where(TransactionRecord.user_id == user_id)
            .group_by(TransactionRecord.type, TransactionRecord.category)
        )
        if start is not None:
            query = query.where(TransactionRecord.date >= start)
        if end is not None:
            query = query.where(TransactionRecord.date <= end)

        with store_errors("summarize transactions"):
            rows = self.db.execute(query).all()

        summary = LedgerSummary(total_expense=Decimal("0.00"), total_income=Decimal("0.00"))
        for kind, category, total in rows:
            amount = _dec(total)
            totals = summary.by_category.setdefault(category, CategoryTotals())
            if kind == TransactionKind.INCOME.value:
                summary.total_income += amount
                totals.income += amount
            else:
                summary.total_expense += amount
                totals.expense += amount
        return summary


class LoanRepository:
    """Repository for loans and their running balances"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(self, user_id: str, intent: NewLoanIntent) -> LoanRecord:
        """Open a loan: nothing paid yet, full principal outstanding"""
        record = LoanRecord(
            user_id=user_id,
            lender_name=intent.lender_name,
            loan_type=intent.loan_type.value,
            principal_amount=intent.principal_amount,
            interest_rate=intent.interest_rate,
            tenure_months=intent.tenure_months,
            monthly_installment=intent.monthly_installment,
            total_paid=Decimal("0.00"),
            remaining_balance=intent.principal_amount,
            currency=intent.currency,
            status=LoanStatus.ACTIVE.value,
            start_date=intent.date,
            notes=intent.notes or None,
        )
        with store_errors("insert loan"):
            self.db.add(record)
            self.db.flush()
        return record

    def list_for_user(self, user_id: str) -> List[LoanRecord]:
        with store_errors("list loans"):
            return list(
                self.db.execute(
                    select(LoanRecord)
                    .where(LoanRecord.user_id == user_id)
                    .order_by(LoanRecord.created_at.desc())
                )
                .scalars()
                .all()
            )

    def delete_for_user(self, user_id: str, loan_id: uuid.UUID) -> bool:
        with store_errors("delete loan"):
            result = self.db.execute(
                delete(LoanRecord).where(LoanRecord.id == loan_id, LoanRecord.user_id == user_id)
            )
        return result.rowcount > 0

    def find_active_by_lender(self, user_id: str, lender_name: str) -> List[Loan]:
        """Active loans whose lender name contains lender_name, case-insensitively"""
        with store_errors("find active loans"):
            records = (
                self.db.execute(
                    select(LoanRecord).where(
                        LoanRecord.user_id == user_id,
                        LoanRecord.status == LoanStatus.ACTIVE.value,
                        LoanRecord.lender_name.ilike(_like_pattern(lender_name), escape="\\"),
                    )
                    .execution_options(populate_existing=True)
                )
                .scalars()
                .all()
            )
            return [to_loan(r) for r in records]

    def update_balance(
        self,
        user_id: str,
        loan_id: uuid.UUID,
        expected_remaining: Decimal,
        total_paid: Decimal,
        remaining_balance: Decimal,
        status: LoanStatus,
    ) -> None:
        """
        Compare-and-swap balance update.

        Only applies while the loan is still active and its remaining balance
        is the value the caller read.

        Raises:
            LoanUpdateConflictError: Another write got there first
        """
        stmt = (
            update(LoanRecord)
            .where(
                LoanRecord.id == loan_id,
                LoanRecord.user_id == user_id,
                LoanRecord.status == LoanStatus.ACTIVE.value,
                LoanRecord.remaining_balance == expected_remaining,
            )
            .values(
                total_paid=total_paid,
                remaining_balance=remaining_balance,
                status=status.value,
            )
            .execution_options(synchronize_session=False)
        )
        with store_errors("update loan balance"):
            result = self.db.execute(stmt)
        if result.rowcount != 1:
            raise LoanUpdateConflictError(f"Loan {loan_id} balance changed concurrently")


class FeedbackRepository:
    """Repository for user feedback"""

    def __init__(self, db: Session):
        self.db = db

    def create_feedback(
        self,
        user_id: str,
        rating: int,
        comment: Optional[str] = None,
        user_name: Optional[str] = None,
        user_email: Optional[str] = None,
    ) -> FeedbackRecord:
        record = FeedbackRecord(
            user_id=user_id,
            user_name=user_name or None,
            user_email=user_email or None,
            rating=rating,
            comment=comment or None,
        )
        with store_errors("insert feedback"):
            self.db.add(record)
            self.db.flush()
        return record
