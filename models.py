import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, Enum, event

from database import Base
from common.enum import CategoryEnum, TransactionTypeEnum, enum_values


def utcnow() -> datetime:
    # Stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_transaction_id() -> str:
    return str(uuid.uuid4())


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=new_transaction_id)
    title = Column(String(100), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow, index=True)
    category = Column(
        Enum(CategoryEnum, values_callable=enum_values, native_enum=False, length=32),
        nullable=False,
        index=True,
    )
    # Derived from the sign of amount on every flush, see _derive_type below
    type = Column(
        Enum(TransactionTypeEnum, values_callable=enum_values, native_enum=False, length=16),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Transaction id={self.id} title={self.title!r} amount={self.amount}>"


@event.listens_for(Transaction, "before_insert")
@event.listens_for(Transaction, "before_update")
def _derive_type(mapper, connection, target):
    if target.amount is None or target.amount == 0:
        raise ValueError("Amount cannot be zero")
    target.type = TransactionTypeEnum.from_amount(target.amount)
