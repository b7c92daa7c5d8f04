"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from fintalk_gateway.infrastructure.clients.extraction import ExtractionClient
from fintalk_gateway.infrastructure.clients.transcription import TranscriptionClient
from fintalk_gateway.infrastructure.database.session import get_db
from fintalk_gateway.services.processor import UtteranceProcessor


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_extraction_client() -> ExtractionClient:
    """Provide structured-extraction client instance"""
    return ExtractionClient()


def get_transcription_client() -> TranscriptionClient:
    """Provide speech-to-text client instance"""
    return TranscriptionClient()


def get_processor(
    db: Session = Depends(get_db),
    extraction_client: ExtractionClient = Depends(get_extraction_client),
    transcription_client: TranscriptionClient = Depends(get_transcription_client),
) -> UtteranceProcessor:
    """Wire a processor to this request's session and service clients"""
    return UtteranceProcessor(db, extraction_client, transcription_client)
