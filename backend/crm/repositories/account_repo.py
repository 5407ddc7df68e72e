"""Account repository."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import Select, select

from crm.models.account import Account
from crm.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    model = Account

    def get(self, account_id: str) -> Optional[Account]:
        return self._get(account_id)

    def list_by_agent(self, agent_id: str, *, client_id: Optional[str] = None) -> Sequence[Account]:
        stmt: Select = select(Account).where(Account.agent_id == agent_id)
        if client_id is not None:
            stmt = stmt.where(Account.client_id == client_id)
        stmt = stmt.order_by(Account.opening_date.desc(), Account.account_id)
        return list(self._execute(stmt).scalars().all())

    def save(self, account: Account) -> Account:
        return self._save(account)
