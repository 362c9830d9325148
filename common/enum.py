import enum


def enum_values(enum_cls):
    return [member.value for member in enum_cls]


class CategoryEnum(str, enum.Enum):
    """Fixed set of transaction categories.

    Shared by the storage column, request validation and the client form
    options so the three can never drift apart.
    """
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    INCOME = "Income"
    INVESTMENT = "Investment"
    OTHER = "Other"

    @classmethod
    def values(cls):
        return enum_values(cls)


class TransactionTypeEnum(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def from_amount(cls, amount: float) -> "TransactionTypeEnum":
        return cls.INCOME if amount > 0 else cls.EXPENSE


class SortOrderEnum(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class ValidationErrorCode(str, enum.Enum):
    REQUIRED_FIELD = "RequiredField"
    TOO_LONG = "TooLong"
    NOT_NUMERIC = "NotNumeric"
    ZERO_AMOUNT = "ZeroAmount"
    INVALID_DATE = "InvalidDate"
    INVALID_CATEGORY = "InvalidCategory"


class ErrorCode(str, enum.Enum):
    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFound"
    MALFORMED_IDENTIFIER = "MalformedIdentifier"
    STORAGE_FAULT = "StorageFault"
    INTERNAL = "InternalError"
