"""Unit tests for extraction normalization and defaulting"""

import pytest
from datetime import date
from decimal import Decimal
from fintalk_gateway.domain.extraction import normalize_extraction, to_amount
from fintalk_gateway.domain.models import (
    Category,
    LoanRepaymentIntent,
    LoanType,
    NewLoanIntent,
    TransactionIntent,
    TransactionKind,
)

ANCHOR = date(2025, 11, 22)


def test_spent_on_shopping_scenario():
    """Model output for "Spent 200 on shopping today" normalizes to an expense"""
    raw = {
        "intent": "transaction",
        "amount": 200,
        "currency": "BDT",
        "category": "shopping",
        "notes": "shopping",
        "type": "expense",
        "date": "2025-11-22",
    }

    result = normalize_extraction(raw, "Spent 200 on shopping today", ANCHOR)

    assert isinstance(result, TransactionIntent)
    assert result.amount == Decimal("200")
    assert result.currency == "BDT"
    assert result.category == Category.SHOPPING
    assert result.kind == TransactionKind.EXPENSE
    assert result.date == ANCHOR
    assert result.to_payload()["type"] == "expense"
    assert result.to_payload()["date"] == "2025-11-22"


def test_empty_payload_gets_every_default():
    result = normalize_extraction({}, "bought something", ANCHOR)

    assert isinstance(result, TransactionIntent)
    assert result.amount == Decimal("0")
    assert result.currency == "BDT"
    assert result.category == Category.OTHER
    assert result.notes == "bought something"
    assert result.kind == TransactionKind.EXPENSE
    assert result.date == ANCHOR
    assert not result.is_actionable


@pytest.mark.parametrize("tag", [None, "", "refund", "NEW LOAN", 42, ["new_loan"]])
def test_unknown_intent_falls_back_to_transaction(tag):
    """Unrecognized tags never produce a loan record"""
    raw = {"intent": tag, "amount": 50, "principal_amount": 5000, "lender_name": "Rahim"}

    result = normalize_extraction(raw, "text", ANCHOR)

    assert isinstance(result, TransactionIntent)
    assert result.amount == Decimal("50")


def test_intent_tag_is_case_insensitive():
    result = normalize_extraction({"intent": " New_Loan ", "principal_amount": 1000}, "text", ANCHOR)
    assert isinstance(result, NewLoanIntent)


@pytest.mark.parametrize("value", ["yesterday", "2025-13-40", "", None, 20251122, "22/11/2025"])
def test_unparseable_date_defaults_to_anchor(value):
    result = normalize_extraction({"amount": 10, "date": value}, "text", ANCHOR)
    assert result.date == ANCHOR


def test_valid_date_is_kept():
    result = normalize_extraction({"amount": 10, "date": "2025-11-21"}, "text", ANCHOR)
    assert result.date == date(2025, 11, 21)


@pytest.mark.parametrize("value", [None, "", "  "])
def test_blank_currency_defaults_to_bdt(value):
    result = normalize_extraction({"amount": 10, "currency": value}, "text", ANCHOR)
    assert result.currency == "BDT"


def test_default_currency_is_configurable():
    result = normalize_extraction({"amount": 10}, "text", ANCHOR, default_currency="USD")
    assert result.currency == "USD"


def test_kind_is_income_only_when_explicit():
    assert normalize_extraction({"amount": 1, "type": "income"}, "t", ANCHOR).kind == TransactionKind.INCOME
    assert normalize_extraction({"amount": 1, "type": "INCOME?"}, "t", ANCHOR).kind == TransactionKind.EXPENSE
    assert normalize_extraction({"amount": 1}, "t", ANCHOR).kind == TransactionKind.EXPENSE


@pytest.mark.parametrize("value", ["Income", " INCOME "])
def test_kind_ignores_case_and_whitespace(value):
    assert normalize_extraction({"amount": 1, "type": value}, "t", ANCHOR).kind == TransactionKind.INCOME


@pytest.mark.parametrize("value", ["Personal", "PERSONAL "])
def test_loan_type_ignores_case_and_whitespace(value):
    raw = {"intent": "new_loan", "lender_name": "Rahim", "principal_amount": 1, "loan_type": value}
    assert normalize_extraction(raw, "t", ANCHOR).loan_type == LoanType.PERSONAL


@pytest.mark.parametrize("value", [None, "", "   "])
def test_loan_without_lender_is_not_actionable(value):
    raw = {"intent": "new_loan", "principal_amount": 5000, "lender_name": value}
    assert not normalize_extraction(raw, "took a loan", ANCHOR).is_actionable


def test_unknown_category_becomes_other():
    result = normalize_extraction({"amount": 1, "category": "gadgets"}, "t", ANCHOR)
    assert result.category == Category.OTHER


@pytest.mark.parametrize(
    "value,expected",
    [
        (200, Decimal("200.00")),
        ("1,250.5", Decimal("1250.50")),
        (12.345, Decimal("12.35")),
        ("two hundred", Decimal("0")),
        (None, Decimal("0")),
        (True, Decimal("0")),
        (-50, Decimal("0")),
        ("NaN", Decimal("0")),
        ("Infinity", Decimal("0")),
        ({"value": 1}, Decimal("0")),
    ],
)
def test_to_amount(value, expected):
    assert to_amount(value) == expected


def test_non_numeric_amount_is_not_actionable():
    result = normalize_extraction({"intent": "transaction", "amount": "lots"}, "spent lots", ANCHOR)
    assert result.amount == 0
    assert not result.is_actionable


def test_new_loan_defaults():
    raw = {"intent": "new_loan", "principal_amount": 50000}

    result = normalize_extraction(raw, "took a loan", ANCHOR)

    assert isinstance(result, NewLoanIntent)
    assert result.lender_name == ""
    assert result.loan_type == LoanType.BANK
    assert result.interest_rate == Decimal("0")
    assert result.tenure_months is None
    assert result.monthly_installment is None
    assert result.notes == "took a loan"
    assert not result.is_actionable


def test_new_loan_full_payload():
    raw = {
        "intent": "new_loan",
        "lender_name": "Rahim",
        "loan_type": "personal",
        "principal_amount": "5000",
        "interest_rate": 12,
        "tenure_months": 24,
        "monthly_installment": 250,
        "date": "2025-11-01",
    }

    result = normalize_extraction(raw, "Borrowed 5000 from Rahim", ANCHOR)

    assert result.loan_type == LoanType.PERSONAL
    assert result.principal_amount == Decimal("5000")
    assert result.interest_rate == Decimal("12")
    assert result.tenure_months == 24
    assert result.monthly_installment == Decimal("250")
    assert result.date == date(2025, 11, 1)


@pytest.mark.parametrize("value", [0, -3, 1.5, "soon"])
def test_invalid_tenure_is_dropped(value):
    result = normalize_extraction({"intent": "new_loan", "principal_amount": 1, "tenure_months": value}, "t", ANCHOR)
    assert result.tenure_months is None


def test_repayment_defaults():
    result = normalize_extraction({"intent": "loan_repayment", "amount": 2000}, "paid installment", ANCHOR)

    assert isinstance(result, LoanRepaymentIntent)
    assert result.lender_name == ""
    assert result.amount == Decimal("2000")
    assert result.currency == "BDT"
    assert result.notes == "paid installment"
    assert not result.is_actionable


def test_repayment_without_amount_is_not_actionable():
    result = normalize_extraction({"intent": "loan_repayment", "lender_name": "BRAC"}, "paid BRAC", ANCHOR)
    assert not result.is_actionable


def test_non_dict_payload_is_treated_as_empty():
    result = normalize_extraction(["not", "an", "object"], "text", ANCHOR)
    assert isinstance(result, TransactionIntent)
    assert result.amount == 0
