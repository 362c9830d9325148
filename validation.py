"""Transaction payload validation shared by the API and the client.

Errors are accumulated across fields and reported together as
``FieldError`` items carrying one of the ``ValidationErrorCode`` codes.
"""
from typing import Any, Iterable, List, Mapping

from pydantic import ValidationError

from common.enum import ValidationErrorCode
from schemas import FieldError, TransactionCreate

_REQUIRED_MESSAGES = {
    "title": "Title is required",
    "amount": "Amount is required",
    "date": "Date is required",
    "category": "Category is required",
}

# Used when pydantic reports something our own validators did not raise
_FALLBACK_CODES = {
    "title": ValidationErrorCode.REQUIRED_FIELD,
    "amount": ValidationErrorCode.NOT_NUMERIC,
    "date": ValidationErrorCode.INVALID_DATE,
    "category": ValidationErrorCode.INVALID_CATEGORY,
}

_KNOWN_CODES = {code.value for code in ValidationErrorCode}


class TransactionValidationError(ValueError):
    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) if parts else "body"


def field_errors_from_pydantic(errors: Iterable[Mapping[str, Any]]) -> List[FieldError]:
    """Translate pydantic error dicts into ``FieldError`` items."""
    field_errors = []
    for error in errors:
        field = _field_name(error.get("loc", ()))
        error_type = error.get("type", "")

        if error_type == "missing":
            code = ValidationErrorCode.REQUIRED_FIELD.value
            message = _REQUIRED_MESSAGES.get(field, f"{field} is required")
        elif error_type in _KNOWN_CODES:
            code = error_type
            message = error.get("msg", "")
        else:
            fallback = _FALLBACK_CODES.get(field)
            code = fallback.value if fallback else error_type
            message = error.get("msg", "")

        field_errors.append(FieldError(field=field, code=code, message=message))
    return field_errors


def validate_transaction_payload(data: Any) -> TransactionCreate:
    """Validate a raw payload, raising ``TransactionValidationError`` with every field error."""
    try:
        return TransactionCreate.model_validate(data)
    except ValidationError as exc:
        raise TransactionValidationError(field_errors_from_pydantic(exc.errors())) from exc
