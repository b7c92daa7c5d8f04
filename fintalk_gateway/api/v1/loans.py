"""GET/DELETE /v1/loans - a user's loans and balances"""

import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fintalk_gateway.api.v1.schemas import LoanListResponse, LoanSchema, SuccessResponse
from fintalk_gateway.domain.exceptions import StoreError
from fintalk_gateway.infrastructure.database.session import get_db
from fintalk_gateway.infrastructure.database.repositories import LoanRepository

router = APIRouter()


@router.get("/loans/{user_id}", response_model=LoanListResponse)
def list_loans(user_id: str, db: Session = Depends(get_db)):
    """
    Retrieve all loans for a user, newest first.

    Returns:
        Loans with total paid, remaining balance and status
    """
    try:
        records = LoanRepository(db).list_for_user(user_id)
    except StoreError as e:
        logging.error(f"Error fetching loans: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch loans")

    return LoanListResponse(
        loans=[
            LoanSchema(
                id=str(ln.id),
                user_id=ln.user_id,
                lender_name=ln.lender_name,
                loan_type=ln.loan_type,
                principal_amount=float(ln.principal_amount),
                interest_rate=float(ln.interest_rate or 0),
                tenure_months=ln.tenure_months,
                monthly_installment=float(ln.monthly_installment) if ln.monthly_installment is not None else None,
                total_paid=float(ln.total_paid),
                remaining_balance=float(ln.remaining_balance),
                currency=ln.currency,
                status=ln.status,
                start_date=ln.start_date,
                notes=ln.notes,
                created_at=ln.created_at.isoformat() if ln.created_at else None,
            )
            for ln in records
        ]
    )


@router.delete("/loans/{loan_id}", response_model=SuccessResponse)
def delete_loan(
    loan_id: str,
    user_id: str = Query(..., min_length=1, description="Owner of the loan"),
    db: Session = Depends(get_db),
):
    """Delete one of the user's loans; derived transactions are kept"""
    try:
        loan_uuid = uuid.UUID(loan_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid loan ID format")

    try:
        deleted = LoanRepository(db).delete_for_user(user_id, loan_uuid)
        db.commit()
    except StoreError as e:
        db.rollback()
        logging.error(f"Error deleting loan: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete loan")

    if not deleted:
        raise HTTPException(status_code=404, detail="Loan not found")
    return SuccessResponse()
