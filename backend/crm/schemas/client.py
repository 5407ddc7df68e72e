"""Schemas for client profiles."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crm.domain.lifecycle import ClientStatus
from crm.models.client import Gender, VerificationStatus
from crm.schemas.common import EMAIL_PATTERN, PHONE_PATTERN


class ClientCreate(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    date_of_birth: date
    gender: Gender
    email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN)
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    address: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    country: str = Field(..., min_length=1, max_length=50)
    postal_code: str = Field(..., min_length=1, max_length=10)
    # Ignored: the owner is always the caller.
    agent_id: Optional[str] = None


class ClientUpdate(BaseModel):
    """Partial update. Status changes go through delete/verify only."""

    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    email: Optional[str] = Field(None, max_length=100, pattern=EMAIL_PATTERN)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=50)
    state: Optional[str] = Field(None, min_length=1, max_length=50)
    country: Optional[str] = Field(None, min_length=1, max_length=50)
    postal_code: Optional[str] = Field(None, min_length=1, max_length=10)

    model_config = ConfigDict(extra="forbid")


class ClientResponse(BaseModel):
    client_id: str
    agent_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    email: str
    phone_number: str
    address: str
    city: str
    state: str
    country: str
    postal_code: str
    verification_status: VerificationStatus
    client_status: ClientStatus

    model_config = ConfigDict(from_attributes=True)
