from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from database import get_db
from common.enum import ErrorCode
from query_builder import build_transaction_query
from schemas import (
    ErrorResponse, TransactionCreate, TransactionDeleteResponse,
    TransactionListResponse, TransactionResponse, TransactionUpdate,
)
import services
from services import MalformedIdentifierError

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
}


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": "Transaction not found", "code": ErrorCode.NOT_FOUND.value},
    )


def _malformed_id() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": "Invalid transaction ID", "code": ErrorCode.MALFORMED_IDENTIFIER.value},
    )


@router.get("", response_model=TransactionListResponse)
def list_transactions(
        category: Optional[str] = None,
        type: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
        min_amount: Optional[str] = Query(None, alias="minAmount"),
        max_amount: Optional[str] = Query(None, alias="maxAmount"),
        sort_by: Optional[str] = Query(None, alias="sortBy"),
        order: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        db: Session = Depends(get_db),
):
    """List transactions with filters, a summary of the whole match set and pagination"""
    params = build_transaction_query(
        category=category,
        type=type,
        search=search,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return services.list_transactions(db, params)


@router.get("/{transaction_id}", response_model=TransactionResponse, responses=_ERROR_RESPONSES)
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """Get a specific transaction"""
    try:
        transaction = services.get_transaction(db, transaction_id)
    except MalformedIdentifierError:
        raise _malformed_id()

    if not transaction:
        raise _not_found()
    return transaction


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
def create_transaction(transaction_data: TransactionCreate, db: Session = Depends(get_db)):
    """Create a new transaction"""
    return services.create_transaction(db, transaction_data)


@router.put("/{transaction_id}", response_model=TransactionResponse, responses=_ERROR_RESPONSES)
def update_transaction(
        transaction_id: str,
        transaction_data: TransactionUpdate,
        db: Session = Depends(get_db),
):
    """Replace the editable fields of a transaction"""
    try:
        transaction = services.update_transaction(db, transaction_id, transaction_data)
    except MalformedIdentifierError:
        raise _malformed_id()

    if not transaction:
        raise _not_found()
    return transaction


@router.delete("/{transaction_id}", response_model=TransactionDeleteResponse, responses=_ERROR_RESPONSES)
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """Delete a transaction and return it"""
    try:
        deleted = services.delete_transaction(db, transaction_id)
    except MalformedIdentifierError:
        raise _malformed_id()

    if not deleted:
        raise _not_found()
    return {"message": "Transaction deleted successfully", "transaction": deleted}
