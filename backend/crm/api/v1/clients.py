"""Client profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from crm.api.deps import get_client_service, require_active_agent
from crm.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from crm.schemas.common import MessageResponse
from crm.security.auth import Principal
from crm.services.resource_access import ClientAccessService


router = APIRouter()


@router.get("", response_model=list[ClientResponse])
def list_clients(
    principal: Principal = Depends(require_active_agent),
    service: ClientAccessService = Depends(get_client_service),
) -> list[ClientResponse]:
    return [ClientResponse.model_validate(c) for c in service.list(principal.sub)]


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: str,
    principal: Principal = Depends(require_active_agent),
    service: ClientAccessService = Depends(get_client_service),
) -> ClientResponse:
    return ClientResponse.model_validate(service.get_one(principal.sub, client_id))


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    body: ClientCreate,
    principal: Principal = Depends(require_active_agent),
    service: ClientAccessService = Depends(get_client_service),
) -> ClientResponse:
    return ClientResponse.model_validate(service.create(principal.sub, body))


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    body: ClientUpdate,
    principal: Principal = Depends(require_active_agent),
    service: ClientAccessService = Depends(get_client_service),
) -> ClientResponse:
    return ClientResponse.model_validate(service.update(principal.sub, client_id, body))


@router.post("/{client_id}/verify", response_model=ClientResponse)
def verify_client(
    client_id: str,
    principal: Principal = Depends(require_active_agent),
    service: ClientAccessService = Depends(get_client_service),
) -> ClientResponse:
    return ClientResponse.model_validate(service.verify(principal.sub, client_id))


@router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: str,
    principal: Principal = Depends(require_active_agent),
    service: ClientAccessService = Depends(get_client_service),
) -> MessageResponse:
    service.delete(principal.sub, client_id)
    return MessageResponse(message="Client deleted successfully")
