"""Mint an HS256 bearer token accepted by the CRM backend (local testing).

The token carries the same claims the identity provider issues: `sub` (the
staff user id) and `cognito:groups` (exactly one staff role).

Usage:
  export CRM_JWT_SECRET="your-secret"
  python scripts/generate_jwt.py --sub 3c1e...-agent --group Agent
"""

from __future__ import annotations

import argparse
import base64
import hashlib
import hmac
import json
import os
import time


def b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def make_jwt(*, sub: str, groups: list[str], secret: str, exp_seconds: int) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {"sub": sub, "cognito:groups": groups, "exp": int(time.time()) + exp_seconds}

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sub", required=True)
    ap.add_argument("--group", required=True, action="append", choices=["Agent", "Admin", "SuperAdmin"])
    ap.add_argument("--exp-seconds", type=int, default=60 * 60)  # 1h
    args = ap.parse_args()

    secret = os.environ.get("CRM_JWT_SECRET")
    if not secret:
        raise SystemExit("Missing CRM_JWT_SECRET in environment.")

    print(make_jwt(sub=args.sub, groups=args.group, secret=secret, exp_seconds=args.exp_seconds))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
