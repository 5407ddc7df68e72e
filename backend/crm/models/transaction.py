"""Transaction model.

Belongs to exactly one account. Transactions carry no owner of their own:
access is decided through the parent account's agent.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import Enum as SAEnum

from crm.core.base import ID_LENGTH, Base, CreatedAtMixin, enum_values, id_column


class TransactionType(str, Enum):
    DEPOSIT = "D"
    WITHDRAWAL = "W"


class TransactionStatus(str, Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    FAILED = "Failed"


class Transaction(CreatedAtMixin, Base):
    __tablename__ = "transactions"

    transaction_id: Mapped[str] = id_column()
    client_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    account_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("accounts.account_id", name="fk_transactions_account_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, name="transaction_type", values_callable=enum_values),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(TransactionStatus, name="transaction_status", values_callable=enum_values),
        nullable=False,
    )

    account = relationship("Account", back_populates="transactions")
