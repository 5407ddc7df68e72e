"""Account endpoints. The caller's staff id is the only owner they can act as."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from crm.api.deps import get_account_service, require_active_agent
from crm.schemas.account import AccountCreate, AccountResponse, AccountUpdate
from crm.security.auth import Principal
from crm.services.resource_access import AccountAccessService


router = APIRouter()


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    client_id: Optional[str] = Query(None, min_length=1, max_length=36),
    principal: Principal = Depends(require_active_agent),
    service: AccountAccessService = Depends(get_account_service),
) -> list[AccountResponse]:
    return [AccountResponse.model_validate(a) for a in service.list(principal.sub, client_id=client_id)]


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    principal: Principal = Depends(require_active_agent),
    service: AccountAccessService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.model_validate(service.get_one(principal.sub, account_id))


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    body: AccountCreate,
    principal: Principal = Depends(require_active_agent),
    service: AccountAccessService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.model_validate(service.create(principal.sub, body))


@router.put("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    body: AccountUpdate,
    principal: Principal = Depends(require_active_agent),
    service: AccountAccessService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.model_validate(service.update(principal.sub, account_id, body))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: str,
    principal: Principal = Depends(require_active_agent),
    service: AccountAccessService = Depends(get_account_service),
) -> Response:
    service.delete(principal.sub, account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
