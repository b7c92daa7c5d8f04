"""Loan repayment reconciliation against the ledger store"""

import dataclasses
from datetime import date
from decimal import Decimal
from typing import Optional

from fintalk_gateway.domain.exceptions import LoanUpdateConflictError, PartialWriteError, StoreError
from fintalk_gateway.domain.models import (
    Category,
    LoanStatus,
    ReconciliationOutcome,
    ReconciliationResult,
    TransactionKind,
)
from fintalk_gateway.domain.reconciliation import apply_repayment, select_loan
from fintalk_gateway.infrastructure.database.repositories import LoanRepository, TransactionRepository
from fintalk_gateway.infrastructure.observability.logging import log_partial_failure
from fintalk_gateway.infrastructure.observability.metrics import loan_conflict_counter, partial_write_counter

NO_MATCH_NOTE = "no matching loan found"


class RepaymentReconciler:
    """
    Applies a repayment to the user's best-matching active loan.

    Writes are flushed, not committed: the caller owns the database
    transaction, so the loan update and the derived expense either land
    together or not at all.
    """

    def __init__(self, loans: LoanRepository, transactions: TransactionRepository):
        self.loans = loans
        self.transactions = transactions

    def reconcile(
        self,
        user_id: str,
        lender_name: str,
        amount: Decimal,
        on: date,
        currency: str,
        request_id: Optional[str] = None,
    ) -> ReconciliationResult:
        """
        Match, update balance, and record the repayment as an expense.

        Raises:
            LoanUpdateConflictError: The matched loan changed after it was read
            PartialWriteError: Balance updated but the expense insert failed
            StoreError: Any other persistence failure
        """
        loan = select_loan(self.loans.find_active_by_lender(user_id, lender_name))

        if loan is None:
            self.transactions.create_transaction(
                user_id=user_id,
                amount=amount,
                currency=currency,
                category=Category.LOAN_REPAYMENT.value,
                notes=f"Loan repayment to {lender_name} ({NO_MATCH_NOTE})",
                kind=TransactionKind.EXPENSE,
                on=on,
            )
            return ReconciliationResult(outcome=ReconciliationOutcome.NO_MATCHING_LOAN, loan=None)

        applied = apply_repayment(loan.total_paid, loan.remaining_balance, amount)

        try:
            self.loans.update_balance(
                user_id=user_id,
                loan_id=loan.id,
                expected_remaining=loan.remaining_balance,
                total_paid=applied.total_paid,
                remaining_balance=applied.remaining_balance,
                status=applied.status,
            )
        except LoanUpdateConflictError:
            loan_conflict_counter.inc()
            raise

        try:
            self.transactions.create_transaction(
                user_id=user_id,
                amount=amount,
                currency=currency,
                category=Category.LOAN_REPAYMENT.value,
                notes=f"Loan repayment to {loan.lender_name}",
                kind=TransactionKind.EXPENSE,
                on=on,
            )
        except StoreError as e:
            partial_write_counter.inc()
            log_partial_failure(
                user_id=user_id,
                loan_id=loan.id,
                completed_step="update_loan_balance",
                failed_step="insert_repayment_transaction",
                error=str(e),
                request_id=request_id,
            )
            raise PartialWriteError(f"Loan {loan.id} updated but repayment transaction failed") from e

        updated = dataclasses.replace(
            loan,
            total_paid=applied.total_paid,
            remaining_balance=applied.remaining_balance,
            status=applied.status,
        )
        outcome = (
            ReconciliationOutcome.RECONCILED_PAID_OFF
            if applied.status == LoanStatus.PAID_OFF
            else ReconciliationOutcome.RECONCILED_ACTIVE
        )
        return ReconciliationResult(outcome=outcome, loan=updated)
