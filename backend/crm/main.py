"""FastAPI application for the CRM backend.

- Bearer-token caller identity with explicit per-router role allow-lists
- Typed service failures rendered as {"error", "message"} with their mapped status
- Request-id propagation and structured access logs
- Safe failure modes for database outages and unexpected errors
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from crm.api.v1.router import router as api_router
from crm.core.errors import CrmError, InconsistentState
from crm.schemas.common import ErrorResponse
import crm.models as _models  # noqa: F401  (register all ORM models deterministically)


logger = logging.getLogger("crm")
logger.setLevel(logging.INFO)


async def crm_error_handler(request: Request, exc: CrmError) -> JSONResponse:
    if isinstance(exc, InconsistentState):
        # Already logged at CRITICAL by the saga; keep the steps visible to operators.
        logger.error("Inconsistent state after steps %s", ",".join(exc.completed_steps))
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error, message=exc.detail).model_dump(),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="CRM API",
        version="1.0.0",
        openapi_url="/openapi.json",
        description="Staff, client, account and transaction management for retail-bank agents.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CrmError, crm_error_handler)
    app.include_router(api_router)

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except OperationalError:
            logger.exception("Database unavailable", extra={"request_id": request_id})
            return JSONResponse(
                status_code=503,
                content={"error": "ServiceUnavailable", "message": "Service temporarily unavailable."},
                headers={"x-request-id": request_id},
            )
        except Exception:  # noqa: BLE001
            logger.exception("Unhandled error", extra={"request_id": request_id})
            return JSONResponse(
                status_code=500,
                content={"error": "InternalError", "message": "Internal error."},
                headers={"x-request-id": request_id},
            )

        duration_ms = int((time.time() - start) * 1000)
        response.headers["x-request-id"] = request_id

        # Structured access log (no headers, no bodies).
        logger.info(
            json.dumps(
                {
                    "event": "access",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                }
            )
        )
        return response

    return app


app = create_app()
