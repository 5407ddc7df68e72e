"""Transaction endpoints (read-only, nested under the owning account)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from crm.api.deps import get_transaction_service, require_active_agent
from crm.schemas.transaction import TransactionResponse
from crm.security.auth import Principal
from crm.services.resource_access import TransactionAccessService


router = APIRouter()


@router.get("/{account_id}/transactions", response_model=list[TransactionResponse])
def list_transactions(
    account_id: str,
    principal: Principal = Depends(require_active_agent),
    service: TransactionAccessService = Depends(get_transaction_service),
) -> list[TransactionResponse]:
    return [TransactionResponse.model_validate(t) for t in service.list(principal.sub, account_id)]


@router.get("/{account_id}/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    account_id: str,
    transaction_id: str,
    principal: Principal = Depends(require_active_agent),
    service: TransactionAccessService = Depends(get_transaction_service),
) -> TransactionResponse:
    return TransactionResponse.model_validate(service.get_one(principal.sub, account_id, transaction_id))
