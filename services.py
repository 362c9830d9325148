import logging
import math
import uuid
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from models import Transaction
from query_builder import TransactionQuery, apply_filters, apply_page, filter_clauses
from schemas import (
    Pagination, TransactionCreate, TransactionListResponse,
    TransactionResponse, TransactionSummary, TransactionUpdate,
)

logger = logging.getLogger(__name__)


class MalformedIdentifierError(ValueError):
    """Raised when a transaction id is not a well-formed UUID."""


def parse_transaction_id(transaction_id: str) -> str:
    try:
        return str(uuid.UUID(str(transaction_id)))
    except (ValueError, AttributeError, TypeError):
        raise MalformedIdentifierError(f"Invalid transaction ID: {transaction_id!r}")


# Summary
def compute_summary(db: Session, params: TransactionQuery) -> TransactionSummary:
    """Aggregate income, expenses and count over the whole filtered set in one query."""
    income = func.coalesce(func.sum(case((Transaction.amount > 0, Transaction.amount), else_=0.0)), 0.0)
    expenses = func.coalesce(func.sum(case((Transaction.amount < 0, -Transaction.amount), else_=0.0)), 0.0)

    total_income, total_expenses, count = db.query(
        income, expenses, func.count(Transaction.id)
    ).filter(*filter_clauses(params)).one()

    total_income = float(total_income or 0.0)
    total_expenses = float(total_expenses or 0.0)
    return TransactionSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        count=int(count or 0),
    )


def build_pagination(params: TransactionQuery, total_items: int) -> Pagination:
    total_pages = math.ceil(total_items / params.limit)
    return Pagination(
        current_page=params.page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=params.limit,
        has_next_page=params.page < total_pages,
        has_prev_page=params.page > 1,
    )


# Transaction CRUD Operations
def list_transactions(db: Session, params: TransactionQuery) -> TransactionListResponse:
    query = apply_filters(db.query(Transaction), params)
    transactions = apply_page(query, params).all()
    summary = compute_summary(db, params)

    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        summary=summary,
        pagination=build_pagination(params, summary.count),
    )


def get_transaction(db: Session, transaction_id: str) -> Optional[Transaction]:
    return db.query(Transaction).filter(
        Transaction.id == parse_transaction_id(transaction_id)
    ).first()


def create_transaction(db: Session, data: TransactionCreate) -> Transaction:
    transaction = Transaction(
        title=data.title,
        amount=data.amount,
        date=data.date,
        category=data.category,
    )

    db.add(transaction)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(transaction)
    logger.info("transaction_created id=%s type=%s", transaction.id, transaction.type.value)
    return transaction


def update_transaction(db: Session, transaction_id: str, data: TransactionUpdate) -> Optional[Transaction]:
    transaction = get_transaction(db, transaction_id)
    if transaction is None:
        return None

    transaction.title = data.title
    transaction.amount = data.amount
    transaction.date = data.date
    transaction.category = data.category

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(transaction)
    logger.info("transaction_updated id=%s type=%s", transaction.id, transaction.type.value)
    return transaction


def delete_transaction(db: Session, transaction_id: str) -> Optional[TransactionResponse]:
    transaction = get_transaction(db, transaction_id)
    if transaction is None:
        return None

    # Capture before the instance is expired by the commit
    deleted = TransactionResponse.model_validate(transaction)
    db.delete(transaction)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("transaction_deleted id=%s", deleted.id)
    return deleted
