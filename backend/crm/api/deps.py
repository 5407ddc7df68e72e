"""API dependencies.

- One database session per request.
- Service factories wired from settings; tests override them through
  `app.dependency_overrides`.
- Customer-data callers must be Agents present and Active in the directory.
- Staff managers must be Active too, except a SuperAdmin never enrolled locally.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from crm.core.db import SessionLocal
from crm.core.errors import Forbidden
from crm.repositories.account_repo import AccountRepository
from crm.repositories.client_repo import ClientRepository
from crm.repositories.staff_directory import StaffDirectory
from crm.repositories.transaction_repo import TransactionRepository
from crm.security.auth import Principal, require_roles
from crm.security.roles import CUSTOMER_DATA_ROLES, STAFF_MANAGER_ROLES, Role
from crm.services.identity_provider import CognitoIdentityProviderGateway, IdentityProviderGateway
from crm.services.notifications import NotificationDispatcher, build_dispatcher
from crm.services.resource_access import AccountAccessService, ClientAccessService, TransactionAccessService
from crm.services.staff_provisioning import StaffProvisioningService


logger = logging.getLogger(__name__)


def get_db_session() -> Generator[Session, None, None]:
    """Provide a database session for request scope."""
    session: Session = SessionLocal()
    try:
        session.autoflush = False
        yield session
    finally:
        session.close()


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProviderGateway:
    return CognitoIdentityProviderGateway.from_settings()


@lru_cache(maxsize=1)
def get_notifier() -> NotificationDispatcher:
    return build_dispatcher()


require_staff_manager = require_roles(*STAFF_MANAGER_ROLES)
require_agent = require_roles(*CUSTOMER_DATA_ROLES)


def require_active_agent(
    principal: Principal = Depends(require_agent),
    db: Session = Depends(get_db_session),
) -> Principal:
    """A disabled (or unknown) agent holding a still-valid token acts on nothing."""
    if StaffDirectory(db).find_by_id(principal.sub) is None:
        raise Forbidden("Caller is not an active staff member.")
    return principal


def require_active_staff_manager(
    principal: Principal = Depends(require_staff_manager),
    db: Session = Depends(get_db_session),
) -> Principal:
    """Admins must be Active locally; a SuperAdmin with no local record is a provider-only root."""
    directory = StaffDirectory(db)
    if directory.find_by_id(principal.sub) is not None:
        return principal
    if principal.role is Role.SUPER_ADMIN and not directory.is_enrolled(principal.sub):
        return principal
    logger.warning("Staff management refused: %s is not an active staff member", principal.sub)
    raise Forbidden("Caller is not an active staff member.")


def get_staff_service(
    db: Session = Depends(get_db_session),
    gateway: IdentityProviderGateway = Depends(get_identity_provider),
) -> StaffProvisioningService:
    return StaffProvisioningService(StaffDirectory(db), gateway)


def get_account_service(
    db: Session = Depends(get_db_session),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> AccountAccessService:
    return AccountAccessService(AccountRepository(db), ClientRepository(db), notifier)


def get_client_service(
    db: Session = Depends(get_db_session),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> ClientAccessService:
    return ClientAccessService(ClientRepository(db), notifier)


def get_transaction_service(db: Session = Depends(get_db_session)) -> TransactionAccessService:
    return TransactionAccessService(TransactionRepository(db), AccountRepository(db))
