"""Tests for transaction payload validation."""

from datetime import datetime

import pytest

from common.enum import CategoryEnum
from validation import TransactionValidationError, field_errors_from_pydantic, validate_transaction_payload


def _payload(**overrides):
    payload = {"title": "Coffee", "amount": -4.5, "date": "2024-01-15", "category": "Food"}
    payload.update(overrides)
    return payload


def _codes(exc_info):
    return {error.field: error.code for error in exc_info.value.errors}


def test_valid_payload_is_normalized() -> None:
    data = validate_transaction_payload(_payload(title="  Coffee  ", amount="-4.50"))

    assert data.title == "Coffee"
    assert data.amount == -4.5
    assert data.date == datetime(2024, 1, 15)
    assert data.category is CategoryEnum.FOOD


def test_client_supplied_type_is_ignored() -> None:
    data = validate_transaction_payload(_payload(type="income"))

    assert not hasattr(data, "type")


def test_blank_title_is_required_field() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload(_payload(title="   "))

    assert _codes(exc_info) == {"title": "RequiredField"}


def test_title_longer_than_100_is_too_long() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload(_payload(title="x" * 101))

    assert _codes(exc_info) == {"title": "TooLong"}
    assert exc_info.value.errors[0].message == "Title cannot exceed 100 characters"


def test_title_of_exactly_100_after_trim_is_accepted() -> None:
    data = validate_transaction_payload(_payload(title=" " + "x" * 100 + " "))

    assert len(data.title) == 100


@pytest.mark.parametrize("amount", [0, 0.0, "0", "-0.00"])
def test_zero_amount_is_rejected(amount) -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload(_payload(amount=amount))

    assert _codes(exc_info) == {"amount": "ZeroAmount"}


@pytest.mark.parametrize("amount", ["abc", True, [1], "nan", "inf"])
def test_non_numeric_amount_is_rejected(amount) -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload(_payload(amount=amount))

    assert _codes(exc_info) == {"amount": "NotNumeric"}


def test_invalid_date_is_rejected() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload(_payload(date="2024-02-30"))

    assert _codes(exc_info) == {"date": "InvalidDate"}


def test_aware_date_is_stored_as_utc() -> None:
    data = validate_transaction_payload(_payload(date="2024-01-15T10:00:00+02:00"))

    assert data.date == datetime(2024, 1, 15, 8, 0)


def test_zulu_date_is_accepted() -> None:
    data = validate_transaction_payload(_payload(date="2024-01-15T10:30:00Z"))

    assert data.date == datetime(2024, 1, 15, 10, 30)


def test_unknown_category_is_rejected() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload(_payload(category="Groceries"))

    assert _codes(exc_info) == {"category": "InvalidCategory"}


def test_all_errors_are_accumulated() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload({"title": "", "amount": 0, "date": "nope", "category": "Nope"})

    assert _codes(exc_info) == {
        "title": "RequiredField",
        "amount": "ZeroAmount",
        "date": "InvalidDate",
        "category": "InvalidCategory",
    }


def test_missing_fields_are_required() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload({})

    assert _codes(exc_info) == {
        "title": "RequiredField",
        "amount": "RequiredField",
        "date": "RequiredField",
        "category": "RequiredField",
    }
    assert {e.message for e in exc_info.value.errors} == {
        "Title is required",
        "Amount is required",
        "Date is required",
        "Category is required",
    }


def test_null_values_are_required() -> None:
    with pytest.raises(TransactionValidationError) as exc_info:
        validate_transaction_payload({"title": None, "amount": None, "date": None, "category": None})

    assert set(_codes(exc_info).values()) == {"RequiredField"}


def test_field_errors_strip_request_location() -> None:
    errors = field_errors_from_pydantic(
        [{"loc": ("body", "amount"), "type": "ZeroAmount", "msg": "Amount cannot be zero"}]
    )

    assert errors[0].field == "amount"
    assert errors[0].code == "ZeroAmount"
