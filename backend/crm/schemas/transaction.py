"""Schemas for transactions (read-only)."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from crm.models.transaction import TransactionStatus, TransactionType


class TransactionResponse(BaseModel):
    transaction_id: str
    client_id: str
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    date: dt.date
    status: TransactionStatus

    model_config = ConfigDict(from_attributes=True)
