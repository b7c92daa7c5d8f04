"""GET/DELETE /v1/transactions - a user's ledger entries"""

import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fintalk_gateway.api.v1.schemas import SuccessResponse, TransactionListResponse, TransactionSchema
from fintalk_gateway.config import settings
from fintalk_gateway.domain.exceptions import StoreError
from fintalk_gateway.infrastructure.database.session import get_db
from fintalk_gateway.infrastructure.database.repositories import TransactionRepository

router = APIRouter()


@router.get("/transactions/{user_id}", response_model=TransactionListResponse)
def list_transactions(
    user_id: str,
    limit: int = Query(settings.transactions_page_limit, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Newest transactions first (by date, then creation time)"""
    try:
        records = TransactionRepository(db).list_for_user(user_id, limit=limit)
    except StoreError as e:
        logging.error(f"Error fetching transactions: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")

    return TransactionListResponse(
        transactions=[
            TransactionSchema(
                id=str(t.id),
                user_id=t.user_id,
                amount=float(t.amount),
                currency=t.currency,
                category=t.category,
                notes=t.notes,
                type=t.type,
                date=t.date,
                created_at=t.created_at.isoformat() if t.created_at else None,
            )
            for t in records
        ]
    )


@router.delete("/transactions/{transaction_id}", response_model=SuccessResponse)
def delete_transaction(
    transaction_id: str,
    user_id: str = Query(..., min_length=1, description="Owner of the transaction"),
    db: Session = Depends(get_db),
):
    """Delete one of the user's transactions"""
    try:
        transaction_uuid = uuid.UUID(transaction_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid transaction ID format")

    try:
        deleted = TransactionRepository(db).delete_for_user(user_id, transaction_uuid)
        db.commit()
    except StoreError as e:
        db.rollback()
        logging.error(f"Error deleting transaction: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete transaction")

    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return SuccessResponse()
