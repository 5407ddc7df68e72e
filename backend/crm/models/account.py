"""Account model.

Owned by the agent who opened it. Deletion is a status flip to Deleted; the row
and its transactions stay as a read-only historical record.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Date, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import Enum as SAEnum

from crm.core.base import ID_LENGTH, Base, CreatedAtMixin, UpdatedAtMixin, enum_values, id_column
from crm.domain.lifecycle import AccountStatus


class AccountType(str, Enum):
    SAVINGS = "Savings"
    CHECKING = "Checking"
    BUSINESS = "Business"


class Account(CreatedAtMixin, UpdatedAtMixin, Base):
    __tablename__ = "accounts"

    account_id: Mapped[str] = id_column()
    client_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False, index=True)
    agent_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False, index=True)

    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type", values_callable=enum_values),
        nullable=False,
    )
    account_status: Mapped[AccountStatus] = mapped_column(
        SAEnum(AccountStatus, name="account_status", values_callable=enum_values),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    opening_date: Mapped[date] = mapped_column(Date, nullable=False)
    initial_deposit: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False)
    branch_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    transactions: Mapped[list["Transaction"]] = relationship(  # noqa: F821
        "Transaction",
        back_populates="account",
        cascade="save-update, merge",
        passive_deletes=True,
    )

    @property
    def owner_id(self) -> str:
        return self.agent_id
