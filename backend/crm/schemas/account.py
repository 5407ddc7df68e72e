"""Schemas for accounts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crm.domain.lifecycle import AccountStatus
from crm.models.account import AccountType
from crm.schemas.common import EMAIL_PATTERN


class AccountCreate(BaseModel):
    client_id: str = Field(..., min_length=1, max_length=36)
    # Notification recipient; defaults to the client's email on file.
    client_email: Optional[str] = Field(None, max_length=100, pattern=EMAIL_PATTERN)
    account_type: AccountType
    initial_deposit: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)
    currency: str = Field(..., min_length=3, max_length=10)
    branch_id: Optional[str] = Field(None, max_length=20)
    opening_date: Optional[date] = None
    # Accepted for compatibility and ignored: the owner is always the caller.
    agent_id: Optional[str] = None


class AccountUpdate(BaseModel):
    account_type: Optional[AccountType] = None
    account_status: Optional[AccountStatus] = None
    opening_date: Optional[date] = None
    initial_deposit: Optional[Decimal] = Field(None, ge=0, max_digits=18, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    branch_id: Optional[str] = Field(None, max_length=20)


class AccountResponse(BaseModel):
    account_id: str
    client_id: str
    agent_id: str
    account_type: AccountType
    account_status: AccountStatus
    opening_date: date
    initial_deposit: Decimal
    currency: str
    branch_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
