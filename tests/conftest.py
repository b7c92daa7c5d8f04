"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from fintalk_gateway.api.dependencies import get_extraction_client, get_transcription_client
from fintalk_gateway.api.main import create_app
from fintalk_gateway.domain.models import LoanType, NewLoanIntent
from fintalk_gateway.infrastructure.database.models import Base
from fintalk_gateway.infrastructure.database.repositories import LoanRepository
from fintalk_gateway.infrastructure.database.session import build_engine, get_db
from fintalk_gateway.services.processor import UtteranceProcessor


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ANCHOR = date(2025, 11, 22)


class FakeExtractionClient:
    """Returns canned raw extraction objects keyed by utterance text"""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.responses = dict(responses or {})
        self.error = error
        self.calls = []

    async def extract(self, text: str, anchor: date) -> Dict[str, Any]:
        self.calls.append((text, anchor))
        if self.error is not None:
            raise self.error
        return self.responses.get(text, {})


class FakeTranscriptionClient:
    """Returns a fixed transcript"""

    def __init__(self, transcript: str = "", error: Optional[Exception] = None):
        self.transcript = transcript
        self.error = error
        self.calls = []

    async def transcribe(self, audio: bytes, filename: str = "audio.webm") -> str:
        self.calls.append((audio, filename))
        if self.error is not None:
            raise self.error
        return self.transcript


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def extraction_client() -> FakeExtractionClient:
    return FakeExtractionClient()


@pytest.fixture
def transcription_client() -> FakeTranscriptionClient:
    return FakeTranscriptionClient()


@pytest.fixture
def processor(
    db: Session,
    extraction_client: FakeExtractionClient,
    transcription_client: FakeTranscriptionClient,
) -> UtteranceProcessor:
    """Processor with fake service clients and a fixed anchor date"""
    return UtteranceProcessor(db, extraction_client, transcription_client, today=lambda: ANCHOR)


@pytest.fixture
def client(
    db: Session,
    extraction_client: FakeExtractionClient,
    transcription_client: FakeTranscriptionClient,
) -> TestClient:
    """Create FastAPI test client with test database and fake service clients"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_extraction_client] = lambda: extraction_client
    app.dependency_overrides[get_transcription_client] = lambda: transcription_client
    return TestClient(app)


@pytest.fixture
def make_loan(db: Session):
    """Insert and commit an active loan for a user"""

    def _make_loan(
        user_id: str = "user_1",
        lender_name: str = "BRAC Bank",
        principal: str = "50000",
        start_date: date = ANCHOR,
        loan_type: LoanType = LoanType.BANK,
    ):
        record = LoanRepository(db).create_loan(
            user_id,
            NewLoanIntent(
                lender_name=lender_name,
                loan_type=loan_type,
                principal_amount=Decimal(principal),
                interest_rate=Decimal("0"),
                tenure_months=None,
                monthly_installment=None,
                currency="BDT",
                date=start_date,
                notes=f"Loan from {lender_name}",
            ),
        )
        db.commit()
        return record.id

    return _make_loan
