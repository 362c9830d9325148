"""Translate list query-string parameters into a SQLAlchemy filter/sort/page descriptor."""
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import false
from sqlalchemy.orm import Query

from common.dates import parse_datetime
from common.enum import CategoryEnum, SortOrderEnum, TransactionTypeEnum, enum_values
from config import settings
from models import Transaction

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "date": Transaction.date,
    "amount": Transaction.amount,
    "title": Transaction.title,
    "category": Transaction.category,
    "type": Transaction.type,
    "createdAt": Transaction.created_at,
    "updatedAt": Transaction.updated_at,
}
DEFAULT_SORT_BY = "date"

# OFFSET is bound as a signed 64-bit integer
MAX_OFFSET = 2 ** 63 - 1


@dataclass
class TransactionQuery:
    category: Optional[str] = None
    type: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    sort_by: str = DEFAULT_SORT_BY
    order: SortOrderEnum = SortOrderEnum.DESC
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_int(value: Any, default: int) -> int:
    if _blank(value):
        return default
    try:
        # parseInt-like: "2.7" reads as 2
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _parse_amount(name: str, value: Any) -> Optional[float]:
    if _blank(value):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = math.nan
    if not math.isfinite(parsed):
        logger.warning("ignoring_unparseable_filter name=%s value=%r", name, value)
        return None
    return parsed


def _parse_date(name: str, value: Any) -> Optional[datetime]:
    if _blank(value):
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        logger.warning("ignoring_unparseable_filter name=%s value=%r", name, value)
    return parsed


def build_transaction_query(
    category: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Any = None,
    end_date: Any = None,
    min_amount: Any = None,
    max_amount: Any = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    page: Any = None,
    limit: Any = None,
) -> TransactionQuery:
    """Normalize raw list parameters.

    Missing values take their defaults, limit is clamped to
    [1, MAX_PAGE_SIZE] and page to [1, last page whose offset fits
    MAX_OFFSET]. Unparseable bounds are dropped.
    """
    if _blank(sort_by) or sort_by not in SORTABLE_COLUMNS:
        sort_by = DEFAULT_SORT_BY
    limit = min(settings.MAX_PAGE_SIZE, max(1, _parse_int(limit, settings.DEFAULT_PAGE_SIZE)))

    return TransactionQuery(
        category=None if _blank(category) else category,
        type=None if _blank(type) else type,
        search=None if _blank(search) else search,
        start_date=_parse_date("startDate", start_date),
        end_date=_parse_date("endDate", end_date),
        min_amount=_parse_amount("minAmount", min_amount),
        max_amount=_parse_amount("maxAmount", max_amount),
        sort_by=sort_by,
        order=SortOrderEnum.ASC if order == SortOrderEnum.ASC.value else SortOrderEnum.DESC,
        page=min(max(1, _parse_int(page, 1)), MAX_OFFSET // limit + 1),
        limit=limit,
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def filter_clauses(params: TransactionQuery) -> List:
    """Return the AND-ed WHERE clauses for ``params``."""
    clauses = []

    if params.category is not None:
        if params.category in CategoryEnum.values():
            clauses.append(Transaction.category == CategoryEnum(params.category))
        else:
            clauses.append(false())

    if params.type is not None:
        if params.type in enum_values(TransactionTypeEnum):
            clauses.append(Transaction.type == TransactionTypeEnum(params.type))
        else:
            clauses.append(false())

    if params.search is not None:
        clauses.append(Transaction.title.ilike(f"%{_escape_like(params.search)}%", escape="\\"))

    if params.start_date is not None:
        clauses.append(Transaction.date >= params.start_date)
    if params.end_date is not None:
        clauses.append(Transaction.date <= params.end_date)

    if params.min_amount is not None:
        clauses.append(Transaction.amount >= params.min_amount)
    if params.max_amount is not None:
        clauses.append(Transaction.amount <= params.max_amount)

    return clauses


def order_clauses(params: TransactionQuery) -> List:
    column = SORTABLE_COLUMNS[params.sort_by]
    if params.order == SortOrderEnum.ASC:
        return [column.asc(), Transaction.id.asc()]
    return [column.desc(), Transaction.id.desc()]


def apply_filters(query: Query, params: TransactionQuery) -> Query:
    return query.filter(*filter_clauses(params))


def apply_page(query: Query, params: TransactionQuery) -> Query:
    return query.order_by(*order_clauses(params)).offset(params.offset).limit(params.limit)
