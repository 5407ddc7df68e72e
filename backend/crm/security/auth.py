"""Caller identity resolution (bearer token -> Principal).

Design:
- Bearer JWT tokens (HS256). Claims carry `sub` and `cognito:groups`, the same
  shape the identity provider issues.
- Exactly one staff role per caller; several groups are rejected as ambiguous.
- Default deny. Routers must explicitly allow roles.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from typing import Any, Callable

from fastapi import Depends, HTTPException, Request, status

from crm.core.settings import get_jwt_secret
from crm.security.roles import Role, is_role_allowed


GROUPS_CLAIM = "cognito:groups"


class AuthError(HTTPException):
    pass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from token claims."""

    sub: str
    roles: frozenset[Role]

    @property
    def role(self) -> Role:
        # get_current_principal guarantees exactly one role.
        return next(iter(self.roles))


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _hmac_sha256(key: bytes, msg: bytes) -> bytes:
    return hmac.new(key, msg, hashlib.sha256).digest()


def _unauthorized(detail: str) -> AuthError:
    return AuthError(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_and_verify_jwt(token: str) -> dict[str, Any]:
    """Verify HS256 JWT signature and minimal standard claims.

    Required claims:
    - sub: subject identifier (the staff identity id)
    - cognito:groups: list of group names
    Optional:
    - exp: unix epoch seconds
    """
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError as e:
        raise _unauthorized("Invalid token format.") from e

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_sig = _b64url_encode(_hmac_sha256(get_jwt_secret(), signing_input))
    if not hmac.compare_digest(expected_sig, sig_b64):
        raise _unauthorized("Invalid token signature.")

    try:
        header = json.loads(_b64url_decode(header_b64))
        payload = json.loads(_b64url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError) as e:
        raise _unauthorized("Invalid token encoding.") from e
    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise _unauthorized("Invalid token encoding.")

    if header.get("alg") != "HS256" or header.get("typ") != "JWT":
        raise _unauthorized("Unsupported token header.")

    exp = payload.get("exp")
    if exp is not None:
        try:
            exp_i = int(exp)
        except (TypeError, ValueError) as e:
            raise _unauthorized("Invalid exp claim.") from e
        if int(time.time()) >= exp_i:
            raise _unauthorized("Token expired.")

    if "sub" not in payload or GROUPS_CLAIM not in payload:
        raise _unauthorized("Missing required claims.")

    return payload


def roles_from_claims(claims: dict[str, Any]) -> frozenset[Role]:
    groups = claims.get(GROUPS_CLAIM) or []
    if isinstance(groups, str):
        groups = [groups]
    roles = set()
    for group in groups:
        role = Role.from_group(str(group))
        if role is not None:
            roles.add(role)
    return frozenset(roles)


def get_current_principal(request: Request) -> Principal:
    """Extract and validate bearer token, returning Principal."""
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        raise _unauthorized("Missing bearer token.")
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise _unauthorized("Missing bearer token.")

    claims = decode_and_verify_jwt(token)
    sub = str(claims["sub"])
    if not sub:
        raise _unauthorized("Invalid sub claim.")

    roles = roles_from_claims(claims)
    if not roles:
        raise _unauthorized("No staff role in token.")
    if len(roles) > 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Multiple roles detected")

    return Principal(sub=sub, roles=roles)


def require_roles(*allowed_roles: Role) -> Callable[[Principal], Principal]:
    """FastAPI dependency factory enforcing an explicit allow-list."""

    allowed = set(allowed_roles)

    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not is_role_allowed(principal.role, allowed):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return principal

    return _dep
