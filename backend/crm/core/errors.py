"""Typed failures surfaced by the CRM services.

Each failure maps to exactly one HTTP status; the API layer installs a single
handler that renders any `CrmError` with its `status_code`.
"""

from __future__ import annotations

from typing import Optional, Sequence


class CrmError(Exception):
    """Base error for business failures decided inside the services."""

    status_code: int = 500
    default_detail: str = "Request failed."

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def error(self) -> str:
        return type(self).__name__


class NotFound(CrmError):
    """Id absent, or logically absent (Disabled staff identity)."""

    status_code = 404
    default_detail = "Not found."


class Forbidden(CrmError):
    """Authenticated but not authorized (ownership or role hierarchy)."""

    status_code = 403
    default_detail = "Forbidden."


class Gone(CrmError):
    """Resource exists but is in a terminal state the operation cannot act on."""

    status_code = 410
    default_detail = "Resource has been deleted."


class Conflict(CrmError):
    """Uniqueness violation on email or phone number."""

    status_code = 400
    default_detail = "Duplicate value."


class InvalidTransition(CrmError):
    """Requested status change is not allowed by the resource lifecycle."""

    status_code = 400
    default_detail = "Status transition not allowed."


class ProviderRejected(CrmError):
    """The identity provider refused the request (e.g. duplicate username)."""

    status_code = 400
    default_detail = "Identity provider rejected the request."


class ProviderUnavailable(CrmError):
    """Transient identity-provider failure. Safe to retry at the caller's discretion."""

    status_code = 500
    default_detail = "Identity provider unavailable."


class InconsistentState(CrmError):
    """A multi-step external orchestration partially succeeded.

    Requires operator reconciliation; `completed_steps` lists what was committed.
    """

    status_code = 500
    default_detail = "Identity provisioning left an inconsistent state."

    def __init__(self, detail: Optional[str] = None, *, completed_steps: Sequence[str] = ()) -> None:
        super().__init__(detail)
        self.completed_steps = tuple(completed_steps)


def error_from_status(status_code: int, message: str) -> CrmError:
    """Translate a (status, message) failure pair into its typed error."""
    for cls in (NotFound, Forbidden, Gone, Conflict):
        if cls.status_code == status_code:
            return cls(message)
    return CrmError(message)
