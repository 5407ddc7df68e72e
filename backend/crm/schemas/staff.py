"""Schemas for staff identity management."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crm.domain.lifecycle import UserStatus
from crm.schemas.common import EMAIL_PATTERN, NAME_PATTERN
from crm.security.roles import Role


class StaffCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=1, max_length=50, pattern=NAME_PATTERN)
    email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN)
    # Omitted -> a random temporary password is generated.
    password: Optional[str] = Field(None, min_length=8, max_length=255)
    role: Role

    model_config = ConfigDict(extra="forbid")


class StaffUpdateRequest(BaseModel):
    """Partial update. Role is not patchable."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=50, pattern=NAME_PATTERN)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50, pattern=NAME_PATTERN)
    email: Optional[str] = Field(None, max_length=100, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=8, max_length=255)

    model_config = ConfigDict(extra="forbid")


class StaffIdentityResponse(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    user_status: UserStatus

    model_config = ConfigDict(from_attributes=True)
