"""Shared response shapes."""

from __future__ import annotations

from pydantic import BaseModel


# Pragmatic address check; deliverability is the provider's concern.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
NAME_PATTERN = r"^[A-Za-z][A-Za-z\s'-]*$"
PHONE_PATTERN = r"^\+\d{10,15}$"


class ErrorResponse(BaseModel):
    error: str
    message: str


class HealthResponse(BaseModel):
    message: str
    service: str
    ip: str


class ResultResponse(BaseModel):
    result: str = "ok"


class MessageResponse(BaseModel):
    message: str
