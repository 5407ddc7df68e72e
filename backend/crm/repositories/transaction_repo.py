"""Transaction repository (read-only: transactions are immutable here)."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import Select, select

from crm.models.transaction import Transaction
from crm.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    model = Transaction

    def list_by_account(self, account_id: str) -> Sequence[Transaction]:
        stmt: Select = (
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.date.desc(), Transaction.transaction_id)
        )
        return list(self._execute(stmt).scalars().all())

    def find_in_account(self, account_id: str, transaction_id: str) -> Optional[Transaction]:
        """A transaction id only resolves inside the account it belongs to."""
        stmt: Select = select(Transaction).where(
            Transaction.account_id == account_id,
            Transaction.transaction_id == transaction_id,
        )
        return self._execute(stmt).scalars().first()
