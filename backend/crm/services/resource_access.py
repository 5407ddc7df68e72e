"""Owner-scoped access to accounts, clients and transactions.

Every single-resource operation runs the same gate, in this order:

1. existence   -> NotFound
2. ownership   -> Forbidden (raw caller id == owner id, no role override)
3. terminal    -> Gone (mutations only)

Callers are staff ids resolved upstream; the services never see credentials.
Mutations dispatch a client notification once persisted; dispatch failures
never fail the operation.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Generic, Optional, Sequence, TypeVar

from crm.core.errors import Conflict, Forbidden, Gone, NotFound
from crm.domain.lifecycle import ACCOUNT_LIFECYCLE, CLIENT_LIFECYCLE, ResourceLifecycle
from crm.models.account import Account
from crm.models.client import Client, VerificationStatus
from crm.models.transaction import Transaction
from crm.repositories.account_repo import AccountRepository
from crm.repositories.client_repo import ClientRepository
from crm.repositories.transaction_repo import TransactionRepository
from crm.schemas.account import AccountCreate, AccountUpdate
from crm.schemas.client import ClientCreate, ClientUpdate
from crm.security.ownership import Decision, authorize
from crm.services.notifications import LoggingNotificationDispatcher, NotificationDispatcher, stamped


logger = logging.getLogger(__name__)

T = TypeVar("T")


def patch_changes(entity: Any, patch: dict[str, Any]) -> dict[str, Any]:
    """Non-null patch fields whose value differs from the entity."""
    return {k: v for k, v in patch.items() if v is not None and getattr(entity, k) != v}


class OwnedResourceService(Generic[T]):
    """Shared existence/ownership/terminal gate."""

    kind: str
    lifecycle: ResourceLifecycle

    def __init__(self, repository: Any, notifier: Optional[NotificationDispatcher] = None) -> None:
        self.repository = repository
        self.notifier = notifier or LoggingNotificationDispatcher()

    def _load_owned(self, caller_id: str, resource_id: str) -> T:
        resource = self.repository.get(resource_id)
        if resource is None:
            logger.warning("%s %s not found (caller %s)", self.kind, resource_id, caller_id)
            raise NotFound(f"{self.kind} {resource_id} does not exist.")
        if authorize(caller_id, resource) is Decision.FORBIDDEN:
            logger.warning(
                "Forbidden: agent %s tried to access %s %s owned by %s",
                caller_id,
                self.kind,
                resource_id,
                resource.owner_id,
            )
            raise Forbidden(f"{self.kind} {resource_id} is not managed by agent {caller_id}.")
        return resource

    def _load_mutable(self, caller_id: str, resource_id: str) -> T:
        resource = self._load_owned(caller_id, resource_id)
        try:
            self.lifecycle.ensure_mutable(resource, resource_id)
        except Gone:
            logger.warning("%s %s is deleted; mutation refused (caller %s)", self.kind, resource_id, caller_id)
            raise
        return resource

    def _notify(self, email: Optional[str], message: str) -> None:
        if not email:
            return
        try:
            self.notifier.notify(email, stamped(message))
        except Exception as e:  # noqa: BLE001
            # best-effort: the mutation is already committed
            logger.warning("%s notification dropped: %s", self.kind, e)

    def get_one(self, caller_id: str, resource_id: str) -> T:
        return self._load_owned(caller_id, resource_id)


class AccountAccessService(OwnedResourceService[Account]):
    kind = "Account"
    lifecycle = ACCOUNT_LIFECYCLE

    def __init__(
        self,
        repository: AccountRepository,
        clients: Optional[ClientRepository] = None,
        notifier: Optional[NotificationDispatcher] = None,
    ) -> None:
        super().__init__(repository, notifier)
        self.clients = clients or ClientRepository(repository.session)

    def _client_email(self, client_id: str) -> Optional[str]:
        client = self.clients.get(client_id)
        return client.email if client is not None else None

    def list(self, caller_id: str, client_id: Optional[str] = None) -> Sequence[Account]:
        return self.repository.list_by_agent(caller_id, client_id=client_id)

    def create(self, caller_id: str, draft: AccountCreate) -> Account:
        # Accounts open only for a live client in the caller's own portfolio.
        client = ClientAccessService(self.clients).get_one(caller_id, draft.client_id)
        CLIENT_LIFECYCLE.ensure_mutable(client, draft.client_id)

        account = Account(
            client_id=draft.client_id,
            agent_id=caller_id,
            account_type=draft.account_type,
            opening_date=draft.opening_date or date.today(),
            initial_deposit=draft.initial_deposit,
            currency=draft.currency,
            branch_id=draft.branch_id,
        )
        self.repository.save(account)
        logger.info(
            "Account created: account_id=%s client_id=%s agent_id=%s",
            account.account_id,
            account.client_id,
            caller_id,
        )
        self._notify(draft.client_email or client.email, "Your account was created successfully")
        return account

    def update(self, caller_id: str, account_id: str, patch: AccountUpdate) -> Account:
        account = self._load_mutable(caller_id, account_id)
        changes = patch_changes(account, patch.model_dump(exclude_none=True))
        if not changes:
            return account

        target_status = changes.pop("account_status", None)
        if target_status is not None:
            self.lifecycle.change_status(account, target_status, account_id)
        for field, value in changes.items():
            setattr(account, field, value)

        self.repository.save(account)
        logger.info("Account updated: %s", account_id)
        self._notify(self._client_email(account.client_id), "Your account was updated successfully")
        return account

    def delete(self, caller_id: str, account_id: str) -> None:
        account = self._load_mutable(caller_id, account_id)
        self.lifecycle.retire(account, account_id)
        self.repository.save(account)
        logger.info("Account deleted: %s", account_id)
        self._notify(self._client_email(account.client_id), "Your account was deleted successfully")


class ClientAccessService(OwnedResourceService[Client]):
    kind = "Client"
    lifecycle = CLIENT_LIFECYCLE

    def _ensure_unique(self, email: Optional[str], phone_number: Optional[str]) -> None:
        if email is not None and self.repository.find_by_email(email) is not None:
            logger.warning("Client email already registered")
            raise Conflict(f"Email {email} already exists.")
        if phone_number is not None and self.repository.find_by_phone_number(phone_number) is not None:
            logger.warning("Client phone number already registered")
            raise Conflict(f"Phone number {phone_number} already exists.")

    def list(self, caller_id: str) -> Sequence[Client]:
        return self.repository.list_by_agent(caller_id)

    def create(self, caller_id: str, draft: ClientCreate) -> Client:
        self._ensure_unique(draft.email, draft.phone_number)

        client = Client(agent_id=caller_id, **draft.model_dump(exclude={"agent_id"}))
        self.repository.save(client)
        logger.info("Client created: client_id=%s agent_id=%s", client.client_id, caller_id)
        self._notify(client.email, "Your profile was created successfully")
        return client

    def update(self, caller_id: str, client_id: str, patch: ClientUpdate) -> Client:
        client = self._load_mutable(caller_id, client_id)
        changes = patch_changes(client, patch.model_dump(exclude_none=True))
        if not changes:
            return client

        new_email = changes.get("email")
        if new_email is not None and new_email.lower() == client.email.lower():
            new_email = None
        self._ensure_unique(new_email, changes.get("phone_number"))

        for field, value in changes.items():
            setattr(client, field, value)
        self.repository.save(client)
        logger.info("Client updated: %s", client_id)
        self._notify(client.email, "Your profile was updated successfully")
        return client

    def verify(self, caller_id: str, client_id: str) -> Client:
        client = self._load_mutable(caller_id, client_id)
        if client.verification_status != VerificationStatus.VERIFIED:
            client.verification_status = VerificationStatus.VERIFIED
            self.repository.save(client)
            logger.info("Client verified: %s", client_id)
        self._notify(client.email, "Your profile was verified successfully")
        return client

    def delete(self, caller_id: str, client_id: str) -> None:
        client = self._load_mutable(caller_id, client_id)
        self.lifecycle.retire(client, client_id)
        self.repository.save(client)
        logger.info("Client deleted: %s", client_id)
        self._notify(client.email, "Your profile was deleted")


class TransactionAccessService:
    """Transactions have no owner of their own; the parent account decides."""

    def __init__(self, repository: TransactionRepository, accounts: AccountRepository) -> None:
        self.repository = repository
        self.accounts = AccountAccessService(accounts)

    def list(self, caller_id: str, account_id: str) -> Sequence[Transaction]:
        self.accounts.get_one(caller_id, account_id)
        return self.repository.list_by_account(account_id)

    def get_one(self, caller_id: str, account_id: str, transaction_id: str) -> Transaction:
        self.accounts.get_one(caller_id, account_id)
        transaction = self.repository.find_in_account(account_id, transaction_id)
        if transaction is None:
            logger.warning("Transaction %s not found in account %s", transaction_id, account_id)
            raise NotFound(f"Transaction {transaction_id} does not exist in account {account_id}.")
        return transaction
