"""Liveness endpoint (unauthenticated)."""

from __future__ import annotations

import socket

from fastapi import APIRouter

from crm.core.settings import get_settings
from crm.schemas.common import HealthResponse


router = APIRouter()


def _host_ip() -> str:
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        return "127.0.0.1"


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(message="Service is healthy", service=get_settings().service_name, ip=_host_ip())
