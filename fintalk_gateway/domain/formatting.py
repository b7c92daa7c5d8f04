"""Human-readable confirmation messages for processed utterances"""

from datetime import date
from decimal import Decimal
from typing import Optional

from fintalk_gateway.domain.models import (
    ExtractionResult,
    LoanRepaymentIntent,
    LoanStatus,
    LoanType,
    NewLoanIntent,
    ReconciliationResult,
    TransactionKind,
)

TRANSACTION_NOT_EXTRACTED = (
    "I couldn't extract the transaction details. "
    "Please provide the amount and specify if it's an expense or income."
)
LOAN_NOT_EXTRACTED = (
    "I couldn't extract the loan details. "
    "Please provide the loan amount and lender name."
)
REPAYMENT_NOT_EXTRACTED = (
    "I couldn't extract the repayment details. "
    "Please provide the amount and which loan it's for."
)


def format_amount(amount: Decimal) -> str:
    """200.00 -> "200", 200.50 -> "200.50" """
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount:.2f}"


def format_when(on: date, anchor: date) -> str:
    return "today" if on == anchor else f"on {on.isoformat()}"


def render_message(
    result: ExtractionResult,
    anchor: date,
    reconciliation: Optional[ReconciliationResult] = None,
) -> str:
    """
    Render the reply shown to the user.

    Pure: identical inputs always give identical output.

    Raises:
        ValueError: For an actionable repayment without a reconciliation result
    """
    if isinstance(result, NewLoanIntent):
        return _render_loan(result, anchor)
    if isinstance(result, LoanRepaymentIntent):
        return _render_repayment(result, anchor, reconciliation)
    return _render_transaction(result, anchor)


def _render_transaction(result, anchor: date) -> str:
    if not result.is_actionable:
        return TRANSACTION_NOT_EXTRACTED

    if result.kind == TransactionKind.INCOME:
        prefix = "💰 Successfully recorded income"
    else:
        prefix = "💸 Successfully recorded expense"
    notes = f" ({result.notes})" if result.notes else ""
    return (
        f"{prefix}: {result.currency} {format_amount(result.amount)} "
        f"for {result.category.value}{notes} {format_when(result.date, anchor)}"
    )


def _render_loan(result: NewLoanIntent, anchor: date) -> str:
    if not result.is_actionable:
        return LOAN_NOT_EXTRACTED

    kind = "personal loan" if result.loan_type == LoanType.PERSONAL else "bank loan"
    msg = (
        f"🏦 Loan recorded: {result.currency} {format_amount(result.principal_amount)} "
        f"{kind} from {result.lender_name}"
    )
    if result.interest_rate:
        msg += f" at {format_amount(result.interest_rate)}% interest"
    if result.tenure_months:
        msg += f" for {result.tenure_months} months"
    return f"{msg} {format_when(result.date, anchor)}"


def _render_repayment(
    result: LoanRepaymentIntent,
    anchor: date,
    reconciliation: Optional[ReconciliationResult],
) -> str:
    if not result.is_actionable:
        return REPAYMENT_NOT_EXTRACTED
    if reconciliation is None:
        raise ValueError("repayment message needs a reconciliation result")

    paid = f"{result.currency} {format_amount(result.amount)}"
    when = format_when(result.date, anchor)
    if not reconciliation.matched:
        return (
            f"💰 Repayment of {paid} to {result.lender_name} {when} "
            "recorded as expense (no matching active loan found)."
        )
    loan = reconciliation.loan
    if loan.status == LoanStatus.PAID_OFF:
        status_msg = "🎉 This loan is now fully paid off!"
    else:
        status_msg = f"Remaining balance: {loan.currency} {loan.remaining_balance:.2f}"
    return f"💰 Repayment recorded: {paid} to {loan.lender_name} {when}. {status_msg}"
