"""Domain models - pure Python dataclasses representing ledger entities and intents"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union


class Category(str, Enum):
    """Transaction categories understood by the ledger"""

    SHOPPING = "shopping"
    HOUSING = "housing"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    LOAN = "loan"
    LOAN_REPAYMENT = "loan_repayment"
    OTHER = "other"


class TransactionKind(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class LoanType(str, Enum):
    BANK = "bank"
    PERSONAL = "personal"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    PAID_OFF = "paid_off"


class ReconciliationOutcome(str, Enum):
    NO_MATCHING_LOAN = "no_matching_loan"
    RECONCILED_ACTIVE = "reconciled_active"
    RECONCILED_PAID_OFF = "reconciled_paid_off"


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class TransactionIntent:
    """Plain expense or income"""

    amount: Decimal
    currency: str
    category: Category
    notes: str
    kind: TransactionKind
    date: date

    intent = "transaction"

    @property
    def is_actionable(self) -> bool:
        return self.amount > 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "amount": _money(self.amount),
            "currency": self.currency,
            "category": self.category.value,
            "notes": self.notes,
            "type": self.kind.value,
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class NewLoanIntent:
    """Money borrowed from a bank or a person"""

    lender_name: str
    loan_type: LoanType
    principal_amount: Decimal
    interest_rate: Decimal
    tenure_months: Optional[int]
    monthly_installment: Optional[Decimal]
    currency: str
    date: date
    notes: str

    intent = "new_loan"

    @property
    def is_actionable(self) -> bool:
        return self.principal_amount > 0 and bool(self.lender_name)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "lender_name": self.lender_name,
            "loan_type": self.loan_type.value,
            "principal_amount": _money(self.principal_amount),
            "interest_rate": _money(self.interest_rate),
            "tenure_months": self.tenure_months,
            "monthly_installment": _money(self.monthly_installment),
            "currency": self.currency,
            "date": self.date.isoformat(),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class LoanRepaymentIntent:
    """Installment or lump sum paid back against an existing loan"""

    lender_name: str
    amount: Decimal
    currency: str
    date: date
    notes: str

    intent = "loan_repayment"

    @property
    def is_actionable(self) -> bool:
        return self.amount > 0 and bool(self.lender_name)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "lender_name": self.lender_name,
            "amount": _money(self.amount),
            "currency": self.currency,
            "date": self.date.isoformat(),
            "notes": self.notes,
        }


ExtractionResult = Union[TransactionIntent, NewLoanIntent, LoanRepaymentIntent]


@dataclass(frozen=True)
class Loan:
    """Snapshot of a stored loan"""

    id: Any
    user_id: str
    lender_name: str
    loan_type: str
    principal_amount: Decimal
    interest_rate: Decimal
    tenure_months: Optional[int]
    monthly_installment: Optional[Decimal]
    total_paid: Decimal
    remaining_balance: Decimal
    currency: str
    status: LoanStatus
    start_date: date
    notes: Optional[str]
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of applying a repayment; loan is None when nothing matched"""

    outcome: ReconciliationOutcome
    loan: Optional[Loan]

    @property
    def matched(self) -> bool:
        return self.loan is not None


@dataclass
class CategoryTotals:
    expense: Decimal = Decimal("0.00")
    income: Decimal = Decimal("0.00")


@dataclass
class LedgerSummary:
    """Totals for a user over an optional date range"""

    total_expense: Decimal
    total_income: Decimal
    by_category: Dict[str, CategoryTotals] = field(default_factory=dict)

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense
