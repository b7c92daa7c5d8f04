"""
End-to-end handling of one utterance.

Flow:
1. Validate caller input (no external call on bad input)
2. Voice mode: transcribe audio to text
3. Extract the raw intent object and normalize it
4. Dispatch by intent and write to the ledger in one database transaction
5. Render the confirmation message
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session

from fintalk_gateway.config import settings
from fintalk_gateway.domain.exceptions import ExtractionError, TranscriptionError, ValidationError
from fintalk_gateway.domain.extraction import normalize_extraction
from fintalk_gateway.domain.formatting import render_message
from fintalk_gateway.domain.models import (
    Category,
    ExtractionResult,
    LoanRepaymentIntent,
    NewLoanIntent,
    ReconciliationResult,
    TransactionKind,
)
from fintalk_gateway.infrastructure.clients.extraction import ExtractionClient
from fintalk_gateway.infrastructure.clients.transcription import TranscriptionClient
from fintalk_gateway.infrastructure.database.repositories import LoanRepository, TransactionRepository
from fintalk_gateway.infrastructure.observability.metrics import extraction_failure_counter
from fintalk_gateway.services.reconciler import RepaymentReconciler
from fintalk_gateway.utils.date_utils import today_in


@dataclass(frozen=True)
class ProcessOutcome:
    """What the caller gets back for one utterance"""

    message: str
    result: ExtractionResult
    outcome: str
    reconciliation: Optional[ReconciliationResult] = None


class UtteranceProcessor:
    """Turns text or voice input into ledger writes and a reply message"""

    def __init__(
        self,
        db: Session,
        extraction_client: ExtractionClient,
        transcription_client: TranscriptionClient,
        today: Optional[Callable[[], date]] = None,
        default_currency: Optional[str] = None,
    ):
        self.db = db
        self.extraction_client = extraction_client
        self.transcription_client = transcription_client
        self.today = today or (lambda: today_in(settings.anchor_timezone))
        self.default_currency = default_currency or settings.default_currency
        self.transactions = TransactionRepository(db)
        self.loans = LoanRepository(db)
        self.reconciler = RepaymentReconciler(self.loans, self.transactions)

    async def process(
        self,
        user_id: str,
        mode: Optional[str],
        text: Optional[str] = None,
        audio: Optional[bytes] = None,
        filename: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> ProcessOutcome:
        """
        Process one utterance.

        Raises:
            ValidationError: Missing user id, unknown mode, or no payload
            TranscriptionError: Speech-to-text failed (nothing written)
            ExtractionError: Extraction failed (nothing written)
            StoreError: Persistence failed (transaction rolled back)
        """
        if not user_id or not user_id.strip():
            raise ValidationError("user_id is required")
        if mode == "voice" and audio:
            input_text = await self._transcribe(audio, filename)
        elif mode == "text" and text and text.strip():
            input_text = text.strip()
        else:
            raise ValidationError("Invalid mode or missing data")

        anchor = self.today()
        try:
            raw = await self.extraction_client.extract(input_text, anchor)
        except ExtractionError:
            extraction_failure_counter.labels(service="extraction").inc()
            raise

        result = normalize_extraction(raw, input_text, anchor, self.default_currency)

        if not result.is_actionable:
            return ProcessOutcome(
                message=render_message(result, anchor),
                result=result,
                outcome="degraded",
            )

        try:
            reconciliation = self._write(user_id, result, request_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        outcome = reconciliation.outcome.value if reconciliation else "recorded"
        return ProcessOutcome(
            message=render_message(result, anchor, reconciliation),
            result=result,
            outcome=outcome,
            reconciliation=reconciliation,
        )

    async def _transcribe(self, audio: bytes, filename: Optional[str]) -> str:
        try:
            return await self.transcription_client.transcribe(audio, filename or "audio.webm")
        except TranscriptionError:
            extraction_failure_counter.labels(service="transcription").inc()
            raise

    def _write(
        self,
        user_id: str,
        result: ExtractionResult,
        request_id: Optional[str],
    ) -> Optional[ReconciliationResult]:
        if isinstance(result, NewLoanIntent):
            self.loans.create_loan(user_id, result)
            # Borrowed money arrives as income
            self.transactions.create_transaction(
                user_id=user_id,
                amount=result.principal_amount,
                currency=result.currency,
                category=Category.LOAN.value,
                notes=f"Loan from {result.lender_name}",
                kind=TransactionKind.INCOME,
                on=result.date,
            )
            return None

        if isinstance(result, LoanRepaymentIntent):
            return self.reconciler.reconcile(
                user_id=user_id,
                lender_name=result.lender_name,
                amount=result.amount,
                on=result.date,
                currency=result.currency,
                request_id=request_id,
            )

        self.transactions.create_transaction(
            user_id=user_id,
            amount=result.amount,
            currency=result.currency,
            category=result.category.value,
            notes=result.notes,
            kind=result.kind,
            on=result.date,
        )
        return None
