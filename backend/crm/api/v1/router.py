"""API root router."""

from __future__ import annotations

from fastapi import APIRouter

from crm.api.v1.accounts import router as accounts_router
from crm.api.v1.clients import router as clients_router
from crm.api.v1.health import router as health_router
from crm.api.v1.transactions import router as transactions_router
from crm.api.v1.users import router as users_router


router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(users_router, prefix="/api/users", tags=["users"])
router.include_router(accounts_router, prefix="/api/accounts", tags=["accounts"])
router.include_router(transactions_router, prefix="/api/accounts", tags=["transactions"])
router.include_router(clients_router, prefix="/api/clients", tags=["clients"])
