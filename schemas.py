import math
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from common.dates import format_utc, parse_datetime
from common.enum import CategoryEnum, TransactionTypeEnum, ValidationErrorCode

TITLE_MAX_LENGTH = 100


def _required(label: str) -> PydanticCustomError:
    return PydanticCustomError(ValidationErrorCode.REQUIRED_FIELD.value, f"{label} is required")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# Transaction Schemas
class TransactionCreate(BaseModel):
    """Editable fields of a transaction.

    Every check runs in a ``before`` validator so that each failure carries
    one of the ``ValidationErrorCode`` values as its error type. ``type`` is
    not a field: it is derived from ``amount`` when the row is written.
    """
    title: str
    amount: float
    date: datetime
    category: CategoryEnum

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, value):
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise _required("Title")
        value = value.strip()
        if len(value) > TITLE_MAX_LENGTH:
            raise PydanticCustomError(
                ValidationErrorCode.TOO_LONG.value,
                "Title cannot exceed {max_length} characters",
                {"max_length": TITLE_MAX_LENGTH},
            )
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, value):
        if _is_blank(value):
            raise _required("Amount")
        not_numeric = PydanticCustomError(ValidationErrorCode.NOT_NUMERIC.value, "Amount must be a number")
        if isinstance(value, bool):
            raise not_numeric
        if isinstance(value, (int, float, Decimal)):
            parsed = float(value)
        elif isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                raise not_numeric
        else:
            raise not_numeric
        if not math.isfinite(parsed):
            raise not_numeric
        if parsed == 0:
            raise PydanticCustomError(ValidationErrorCode.ZERO_AMOUNT.value, "Amount cannot be zero")
        return parsed

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, value):
        if _is_blank(value):
            raise _required("Date")
        parsed = parse_datetime(value)
        if parsed is None:
            raise PydanticCustomError(ValidationErrorCode.INVALID_DATE.value, "Date must be a valid date")
        return parsed

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, value):
        if _is_blank(value):
            raise _required("Category")
        if isinstance(value, CategoryEnum):
            return value
        if not isinstance(value, str) or value not in CategoryEnum.values():
            raise PydanticCustomError(
                ValidationErrorCode.INVALID_CATEGORY.value,
                "Category must be one of the predefined options",
            )
        return CategoryEnum(value)


class TransactionUpdate(TransactionCreate):
    """Full replace of the four editable fields."""


class TransactionResponse(BaseModel):
    id: str
    title: str
    amount: float
    date: datetime
    category: CategoryEnum
    type: TransactionTypeEnum
    created_at: datetime
    updated_at: datetime

    @field_serializer("date", "created_at", "updated_at")
    def serialize_utc(self, value: datetime) -> str:
        return format_utc(value)

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class TransactionSummary(BaseModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    count: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    summary: TransactionSummary
    pagination: Pagination


class TransactionDeleteResponse(BaseModel):
    message: str
    transaction: TransactionResponse


# Error Schemas
class FieldError(BaseModel):
    field: str
    code: str
    message: str


class ErrorResponse(BaseModel):
    message: str
    code: str
    errors: Optional[List[FieldError]] = None


class HealthResponse(BaseModel):
    message: str
    timestamp: datetime
    environment: str
