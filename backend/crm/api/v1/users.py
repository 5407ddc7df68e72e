"""Staff identity management endpoints (Admin and SuperAdmin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from crm.api.deps import get_staff_service, require_active_staff_manager
from crm.repositories.staff_directory import StaffPatch
from crm.schemas.common import ResultResponse
from crm.schemas.staff import StaffCreateRequest, StaffIdentityResponse, StaffUpdateRequest
from crm.security.auth import Principal
from crm.services.staff_provisioning import NewStaffIdentity, StaffProvisioningService


router = APIRouter()


@router.post("", response_model=StaffIdentityResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: StaffCreateRequest,
    principal: Principal = Depends(require_active_staff_manager),
    service: StaffProvisioningService = Depends(get_staff_service),
) -> StaffIdentityResponse:
    identity = service.create(
        principal.role,
        NewStaffIdentity(
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            role=body.role,
        ),
        body.password,
    )
    return StaffIdentityResponse.model_validate(identity)


@router.get("", response_model=list[StaffIdentityResponse])
def list_users(
    principal: Principal = Depends(require_active_staff_manager),
    service: StaffProvisioningService = Depends(get_staff_service),
) -> list[StaffIdentityResponse]:
    return [StaffIdentityResponse.model_validate(i) for i in service.list_identities(principal.role)]


@router.patch("/{user_id}", response_model=ResultResponse)
def update_user(
    user_id: str,
    body: StaffUpdateRequest,
    principal: Principal = Depends(require_active_staff_manager),
    service: StaffProvisioningService = Depends(get_staff_service),
) -> ResultResponse:
    patch = StaffPatch(first_name=body.first_name, last_name=body.last_name, email=body.email)
    service.update(principal.role, user_id, patch, body.password)
    return ResultResponse()


@router.delete("/{user_id}", response_model=ResultResponse)
def deactivate_user(
    user_id: str,
    principal: Principal = Depends(require_active_staff_manager),
    service: StaffProvisioningService = Depends(get_staff_service),
) -> ResultResponse:
    service.deactivate(principal.role, user_id)
    return ResultResponse()
