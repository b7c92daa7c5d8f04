"""Text-from-audio HTTP client (OpenAI-compatible audio transcriptions)"""

import httpx

from fintalk_gateway.config import settings
from fintalk_gateway.domain.exceptions import TranscriptionError


class TranscriptionClient:
    """Client for the external speech-to-text service"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.extraction_api_base).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.extraction_api_key
        self.model = model or settings.transcription_model
        self.language = language or settings.transcription_language
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    async def transcribe(self, audio: bytes, filename: str = "audio.webm") -> str:
        """
        Upload audio and return its plain-text transcript.

        Raises:
            TranscriptionError: On timeout, HTTP errors, or a reply without text
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/audio/transcriptions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    files={"file": (filename or "audio.webm", audio)},
                    data={"model": self.model, "language": self.language},
                )
                response.raise_for_status()
                text = response.json()["text"]

            except httpx.TimeoutException as e:
                raise TranscriptionError(f"Transcription timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TranscriptionError(f"Transcription service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TranscriptionError(f"Transcription service unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise TranscriptionError(f"Malformed transcription response: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise TranscriptionError("Transcription returned no text")
        return text.strip()
