"""Normalization of raw structured-extraction output into typed intents"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional

from fintalk_gateway.domain.models import (
    Category,
    ExtractionResult,
    LoanRepaymentIntent,
    LoanType,
    NewLoanIntent,
    TransactionIntent,
    TransactionKind,
)
from fintalk_gateway.utils.date_utils import parse_iso_date

DEFAULT_CURRENCY = "BDT"

Q2 = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """
    Coerce a raw numeric field to a non-negative two-place Decimal.

    Absent, non-numeric, non-finite and negative values all become 0, which
    callers read as "no amount found".
    """
    if value is None or isinstance(value, bool):
        return Decimal("0.00")
    try:
        amount = Decimal(str(value).strip().replace(",", ""))
        if not amount.is_finite() or amount < 0:
            return Decimal("0.00")
        return amount.quantize(Q2, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


def _optional_amount(value: Any) -> Optional[Decimal]:
    amount = to_amount(value)
    return amount if amount > 0 else None


def _optional_months(value: Any) -> Optional[int]:
    amount = to_amount(value)
    if amount <= 0 or amount != amount.to_integral_value():
        return None
    return int(amount)


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _tag(value: Any) -> str:
    """Enum-like wire value, trimmed and lowercased; "" when not a string"""
    if isinstance(value, str):
        return value.strip().lower()
    return ""


def _category(value: Any) -> Category:
    try:
        return Category(_tag(value))
    except ValueError:
        return Category.OTHER


def _intent_tag(value: Any) -> str:
    tag = _tag(value)
    if tag in (NewLoanIntent.intent, LoanRepaymentIntent.intent):
        return tag
    # Ambiguous or unknown tags never create loan records.
    return TransactionIntent.intent


def normalize_extraction(
    raw: Dict[str, Any],
    text: str,
    anchor: date,
    default_currency: str = DEFAULT_CURRENCY,
) -> ExtractionResult:
    """
    Decode the extraction service's JSON object into a fully-defaulted intent.

    Args:
        raw: Parsed JSON object returned by the extraction service
        text: Original utterance, used as the fallback for notes
        anchor: "Today" for the request, the fallback date
        default_currency: Currency used when the payload has none

    Returns:
        TransactionIntent, NewLoanIntent or LoanRepaymentIntent
    """
    if not isinstance(raw, dict):
        raw = {}

    tag = _intent_tag(raw.get("intent"))
    currency = _text(raw.get("currency"), default_currency)
    on = parse_iso_date(raw.get("date"), anchor)
    notes = _text(raw.get("notes"), text)

    if tag == NewLoanIntent.intent:
        return NewLoanIntent(
            lender_name=_text(raw.get("lender_name"), ""),
            loan_type=LoanType.PERSONAL if _tag(raw.get("loan_type")) == "personal" else LoanType.BANK,
            principal_amount=to_amount(raw.get("principal_amount")),
            interest_rate=to_amount(raw.get("interest_rate")),
            tenure_months=_optional_months(raw.get("tenure_months")),
            monthly_installment=_optional_amount(raw.get("monthly_installment")),
            currency=currency,
            date=on,
            notes=notes,
        )

    if tag == LoanRepaymentIntent.intent:
        return LoanRepaymentIntent(
            lender_name=_text(raw.get("lender_name"), ""),
            amount=to_amount(raw.get("amount")),
            currency=currency,
            date=on,
            notes=notes,
        )

    return TransactionIntent(
        amount=to_amount(raw.get("amount")),
        currency=currency,
        category=_category(raw.get("category")),
        notes=notes,
        kind=TransactionKind.INCOME if _tag(raw.get("type")) == "income" else TransactionKind.EXPENSE,
        date=on,
    )
