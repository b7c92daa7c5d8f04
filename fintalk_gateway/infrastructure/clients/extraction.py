"""Structured-extraction HTTP client (OpenAI-compatible chat completions)"""

import json
from datetime import date
from typing import Any, Dict, Optional

import httpx

from fintalk_gateway.config import settings
from fintalk_gateway.domain.exceptions import ExtractionError

SYSTEM_PROMPT = """You extract structured data for a personal expense and loan tracker.
Today's date is {today}. Use it as the date unless the user gives another one,
and resolve relative dates ("yesterday", "last Friday") against it.

Classify the message into exactly one intent:
- "transaction": an ordinary expense or income ("spent 200 on food", "got salary 50000")
- "new_loan": the user borrowed money from a bank or a person ("took 50000 loan from BRAC Bank")
- "loan_repayment": the user paid back part or all of an existing loan ("paid 2000 installment for BRAC Bank loan")
If unsure between a transaction and a loan, choose "transaction".

Reply with one JSON object only.

transaction:
{{"intent": "transaction", "amount": number, "currency": "BDT", "category": one of
"shopping" | "housing" | "food" | "transportation" | "entertainment" | "healthcare" |
"education" | "loan" | "loan_repayment" | "other", "notes": string,
"type": "expense" | "income", "date": "YYYY-MM-DD"}}

new_loan:
{{"intent": "new_loan", "lender_name": string, "loan_type": "bank" | "personal",
"principal_amount": number, "interest_rate": number (annual %, 0 if not given),
"tenure_months": number | null, "monthly_installment": number | null,
"currency": "BDT", "date": "YYYY-MM-DD", "notes": string}}

loan_repayment:
{{"intent": "loan_repayment", "lender_name": string, "amount": number,
"currency": "BDT", "date": "YYYY-MM-DD", "notes": string}}

Examples:
"Spent 200 on shopping today" ->
{{"intent": "transaction", "amount": 200, "currency": "BDT", "category": "shopping", "notes": "shopping", "type": "expense", "date": "{today}"}}
"Received 5000 from Mehdi" ->
{{"intent": "transaction", "amount": 5000, "currency": "BDT", "category": "other", "notes": "from Mehdi", "type": "income", "date": "{today}"}}
"I took a 50000 BDT loan from BRAC Bank at 12% interest for 2 years" ->
{{"intent": "new_loan", "lender_name": "BRAC Bank", "loan_type": "bank", "principal_amount": 50000, "interest_rate": 12, "tenure_months": 24, "monthly_installment": null, "currency": "BDT", "date": "{today}", "notes": "Loan from BRAC Bank"}}
"Repaid 5000 to Rahim" ->
{{"intent": "loan_repayment", "lender_name": "Rahim", "amount": 5000, "currency": "BDT", "date": "{today}", "notes": "Repayment to Rahim"}}
"""


class ExtractionClient:
    """Client for the external structured-extraction model"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.extraction_api_base).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.extraction_api_key
        self.model = model or settings.extraction_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.temperature = settings.extraction_temperature
        self._transport = transport

    def build_request(self, text: str, anchor: date) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(today=anchor.isoformat())},
                {"role": "user", "content": text},
            ],
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

    async def extract(self, text: str, anchor: date) -> Dict[str, Any]:
        """
        Ask the model for the raw intent object of an utterance.

        Returns the decoded JSON object as-is; defaulting happens in
        domain.extraction.normalize_extraction.

        Raises:
            ExtractionError: On timeout, HTTP errors, or a non-JSON/non-object reply
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=self.build_request(text, anchor),
                )
                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]
                parsed = json.loads(content)

            except httpx.TimeoutException as e:
                raise ExtractionError(f"Extraction service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ExtractionError(f"Extraction service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ExtractionError(f"Extraction service unreachable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError) as e:
                raise ExtractionError(f"Malformed extraction response: {e}") from e

        if not isinstance(parsed, dict):
            raise ExtractionError("Extraction response is not a JSON object")
        return parsed
