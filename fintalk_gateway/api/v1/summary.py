"""GET /v1/summary/{user_id} - expense and income totals"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fintalk_gateway.api.v1.schemas import CategoryTotalsSchema, SummaryResponse
from fintalk_gateway.domain.exceptions import StoreError
from fintalk_gateway.infrastructure.database.session import get_db
from fintalk_gateway.infrastructure.database.repositories import TransactionRepository

router = APIRouter()


@router.get("/summary/{user_id}", response_model=SummaryResponse)
def get_summary(
    user_id: str,
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound"),
    db: Session = Depends(get_db),
):
    """Totals by kind and by category, with income minus expense as balance"""
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    try:
        summary = TransactionRepository(db).summarize_for_user(user_id, start_date, end_date)
    except StoreError as e:
        logging.error(f"Error fetching transaction summary: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch summary")

    return SummaryResponse(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        total_expense=float(summary.total_expense),
        total_income=float(summary.total_income),
        balance=float(summary.balance),
        by_category={
            category: CategoryTotalsSchema(expense=float(t.expense), income=float(t.income))
            for category, t in summary.by_category.items()
        },
    )
