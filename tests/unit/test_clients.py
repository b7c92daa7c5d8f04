"""Unit tests for the extraction and transcription HTTP clients"""

import json
import httpx
import pytest
from datetime import date
from fintalk_gateway.domain.exceptions import ExtractionError, TranscriptionError
from fintalk_gateway.infrastructure.clients.extraction import ExtractionClient
from fintalk_gateway.infrastructure.clients.transcription import TranscriptionClient

ANCHOR = date(2025, 11, 22)


def _chat_reply(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _extraction_client(handler) -> ExtractionClient:
    return ExtractionClient(
        base_url="http://llm.test/v1/",
        api_key="test-key",
        model="test-model",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def _transcription_client(handler) -> TranscriptionClient:
    return TranscriptionClient(
        base_url="http://llm.test/v1",
        api_key="test-key",
        model="whisper-1",
        language="en",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


async def test_extract_returns_raw_object_and_sends_anchor_date():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_chat_reply(json.dumps({"intent": "transaction", "amount": 200})))

    raw = await _extraction_client(handler).extract("Spent 200 on shopping today", ANCHOR)

    assert raw == {"intent": "transaction", "amount": 200}
    assert seen["url"] == "http://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert "2025-11-22" in seen["body"]["messages"][0]["content"]
    assert seen["body"]["messages"][1] == {"role": "user", "content": "Spent 200 on shopping today"}


async def test_extract_timeout_raises_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ExtractionError, match="timeout"):
        await _extraction_client(handler).extract("text", ANCHOR)


async def test_extract_http_error_raises_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    with pytest.raises(ExtractionError, match="500"):
        await _extraction_client(handler).extract("text", ANCHOR)


@pytest.mark.parametrize(
    "payload",
    [
        _chat_reply("not json at all"),
        _chat_reply("[1, 2, 3]"),
        _chat_reply(None),
        {"choices": []},
        {"unexpected": True},
    ],
)
async def test_extract_malformed_reply_raises_extraction_error(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(ExtractionError):
        await _extraction_client(handler).extract("text", ANCHOR)


async def test_extract_non_json_body_raises_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway error</html>")

    with pytest.raises(ExtractionError):
        await _extraction_client(handler).extract("text", ANCHOR)


async def test_transcribe_uploads_audio_and_returns_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"text": "  Spent 200 on food  "})

    text = await _transcription_client(handler).transcribe(b"RIFF-audio", "memo.webm")

    assert text == "Spent 200 on food"
    assert seen["url"] == "http://llm.test/v1/audio/transcriptions"
    assert b"RIFF-audio" in seen["body"]
    assert b"memo.webm" in seen["body"]
    assert b"whisper-1" in seen["body"]


async def test_transcribe_failure_is_distinct_from_extraction_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    with pytest.raises(TranscriptionError):
        await _transcription_client(handler).transcribe(b"audio", "memo.webm")


async def test_transcribe_empty_text_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"text": "   "})

    with pytest.raises(TranscriptionError):
        await _transcription_client(handler).transcribe(b"audio")
