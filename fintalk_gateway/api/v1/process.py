"""POST /v1/process - turn a text or voice utterance into ledger records"""

import time
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from fintalk_gateway.api.dependencies import get_processor, get_request_id
from fintalk_gateway.api.v1.schemas import ProcessResponse, ReconciliationSchema
from fintalk_gateway.config import settings
from fintalk_gateway.domain.exceptions import (
    ExtractionError,
    LoanUpdateConflictError,
    StoreError,
    TranscriptionError,
    ValidationError,
)
from fintalk_gateway.domain.models import ReconciliationResult
from fintalk_gateway.infrastructure.observability.logging import log_utterance_processed
from fintalk_gateway.infrastructure.observability.metrics import record_utterance
from fintalk_gateway.services.processor import UtteranceProcessor

router = APIRouter()


def _reconciliation_schema(result: Optional[ReconciliationResult]) -> Optional[ReconciliationSchema]:
    if result is None:
        return None
    if not result.matched:
        return ReconciliationSchema(outcome=result.outcome.value)
    return ReconciliationSchema(
        outcome=result.outcome.value,
        loan_id=str(result.loan.id),
        total_paid=float(result.loan.total_paid),
        remaining_balance=float(result.loan.remaining_balance),
        status=result.loan.status.value,
    )


@router.post("/process", response_model=ProcessResponse)
async def process_utterance(
    request: Request,
    mode: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None),
    text: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    processor: UtteranceProcessor = Depends(get_processor),
):
    """
    Process a typed or spoken financial event.

    Flow:
    1. Voice mode: transcribe the uploaded audio
    2. Extract and normalize the intent
    3. Record a transaction, open a loan, or reconcile a repayment
    4. Return the confirmation message with the extracted data
    """
    start_time = time.time()
    request_id = get_request_id(request)

    audio = None
    filename = None
    if file is not None:
        audio = await file.read()
        filename = file.filename
        if len(audio) > settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="Audio file too large")

    try:
        outcome = await processor.process(
            user_id=user_id or "",
            mode=mode,
            text=text,
            audio=audio,
            filename=filename,
            request_id=request_id,
        )

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except TranscriptionError as e:
        logging.error(f"Transcription error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Transcription service unavailable")

    except ExtractionError as e:
        logging.error(f"Extraction error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Extraction service unavailable")

    except LoanUpdateConflictError as e:
        logging.warning(f"Loan update conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail="Loan was updated concurrently, please retry")

    except StoreError as e:
        logging.error(f"Store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to process request")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    intent = outcome.result.intent
    record_utterance(intent, outcome.outcome)
    log_utterance_processed(request_id, user_id, mode, intent, outcome.outcome, duration_ms)

    return ProcessResponse(
        output=outcome.message,
        reply=outcome.message,
        data=outcome.result.to_payload(),
        reconciliation=_reconciliation_schema(outcome.reconciliation),
    )
