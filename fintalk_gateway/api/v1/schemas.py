"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ReconciliationSchema(BaseModel):
    """How a repayment was applied"""

    outcome: str
    loan_id: Optional[str] = None
    total_paid: Optional[float] = None
    remaining_balance: Optional[float] = None
    status: Optional[str] = None


class ProcessResponse(BaseModel):
    """Response for POST /v1/process"""

    output: str
    reply: str
    data: Dict[str, Any]
    reconciliation: Optional[ReconciliationSchema] = None


class TransactionSchema(BaseModel):
    """Single ledger transaction"""

    id: str
    user_id: str
    amount: float
    currency: str
    category: str
    notes: Optional[str] = None
    type: str
    date: date
    created_at: Optional[str] = None


class TransactionListResponse(BaseModel):
    """Response for GET /v1/transactions/{user_id}"""

    transactions: List[TransactionSchema]


class LoanSchema(BaseModel):
    """Single loan with its running balance"""

    id: str
    user_id: str
    lender_name: str
    loan_type: str
    principal_amount: float
    interest_rate: float
    tenure_months: Optional[int] = None
    monthly_installment: Optional[float] = None
    total_paid: float
    remaining_balance: float
    currency: str
    status: str
    start_date: date
    notes: Optional[str] = None
    created_at: Optional[str] = None


class LoanListResponse(BaseModel):
    """Response for GET /v1/loans/{user_id}"""

    loans: List[LoanSchema]


class CategoryTotalsSchema(BaseModel):
    expense: float
    income: float


class SummaryResponse(BaseModel):
    """Response for GET /v1/summary/{user_id}"""

    user_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_expense: float
    total_income: float
    balance: float
    by_category: Dict[str, CategoryTotalsSchema]


class FeedbackRequest(BaseModel):
    """Request body for POST /v1/feedback"""

    user_id: Optional[str] = Field(None, description="User identifier")
    rating: Any = Field(None, description="Star rating, 1 to 5; checked by validate_feedback")
    comment: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
