"""Client repository.

Uniqueness lookups span every client regardless of owner or status: the email
and phone columns are unique across the whole directory.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import Select, func, select

from crm.models.client import Client
from crm.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    model = Client

    def get(self, client_id: str) -> Optional[Client]:
        return self._get(client_id)

    def list_by_agent(self, agent_id: str) -> Sequence[Client]:
        stmt: Select = (
            select(Client)
            .where(Client.agent_id == agent_id)
            .order_by(Client.last_name, Client.first_name, Client.client_id)
        )
        return list(self._execute(stmt).scalars().all())

    def find_by_email(self, email: str) -> Optional[Client]:
        stmt: Select = select(Client).where(func.lower(Client.email) == email.lower())
        return self._execute(stmt).scalars().first()

    def find_by_phone_number(self, phone_number: str) -> Optional[Client]:
        stmt: Select = select(Client).where(Client.phone_number == phone_number)
        return self._execute(stmt).scalars().first()

    def save(self, client: Client) -> Client:
        return self._save(client)
