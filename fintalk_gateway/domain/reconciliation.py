"""Repayment arithmetic and loan selection - pure functions, no I/O"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from fintalk_gateway.domain.models import Loan, LoanStatus

_EPOCH = datetime.min


@dataclass(frozen=True)
class RepaymentApplication:
    """New balance figures for a loan after one repayment"""

    total_paid: Decimal
    remaining_balance: Decimal
    status: LoanStatus


def apply_repayment(total_paid: Decimal, remaining_balance: Decimal, amount: Decimal) -> RepaymentApplication:
    """
    Apply a repayment to a loan's running totals.

    Overpayment is absorbed: remaining balance floors at zero and the excess
    is neither carried forward nor refunded. The loan is paid off exactly
    when nothing remains.
    """
    new_total_paid = total_paid + amount
    new_remaining = max(Decimal("0"), remaining_balance - amount)
    status = LoanStatus.PAID_OFF if new_remaining == 0 else LoanStatus.ACTIVE
    return RepaymentApplication(
        total_paid=new_total_paid,
        remaining_balance=new_remaining,
        status=status,
    )


def select_loan(candidates: Sequence[Loan]) -> Optional[Loan]:
    """
    Pick the loan a repayment applies to among several lender matches.

    Most recent start_date wins, then most recent creation, then highest id,
    so the choice never depends on store row order.
    """
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda loan: (
            loan.start_date or date.min,
            _naive(loan.created_at) or _EPOCH,
            str(loan.id),
        ),
    )


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=None)
