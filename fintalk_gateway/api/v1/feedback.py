"""POST /v1/feedback - star rating and comment"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fintalk_gateway.api.v1.schemas import FeedbackRequest, SuccessResponse
from fintalk_gateway.domain.exceptions import StoreError, ValidationError
from fintalk_gateway.domain.feedback import validate_feedback
from fintalk_gateway.infrastructure.database.session import get_db
from fintalk_gateway.infrastructure.database.repositories import FeedbackRepository

router = APIRouter()


@router.post("/feedback", response_model=SuccessResponse)
def submit_feedback(request_body: FeedbackRequest, db: Session = Depends(get_db)):
    """Store a 1-5 rating with an optional comment"""
    try:
        rating = validate_feedback(request_body.user_id, request_body.rating)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        FeedbackRepository(db).create_feedback(
            user_id=request_body.user_id,
            rating=rating,
            comment=request_body.comment,
            user_name=request_body.user_name,
            user_email=request_body.user_email,
        )
        db.commit()
    except StoreError as e:
        db.rollback()
        logging.error(f"Error saving feedback: {e}")
        raise HTTPException(status_code=500, detail="Failed to save feedback")

    return SuccessResponse(message="Feedback submitted successfully")
