from __future__ import annotations

import os
from pathlib import Path


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None
    if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
        value = value[1:-1]
    return key, value


def env_file_candidates() -> list[Path]:
    # backend/crm/core/env.py -> backend/crm/core -> backend/crm -> backend -> repo root
    repo_root = Path(__file__).resolve().parents[3]
    return [
        repo_root / ".env",
        repo_root / "backend" / ".env",
    ]


def load_env_if_present(*, override: bool = False) -> None:
    """Load .env files into the process environment if present.

    - Searches the repo root `.env` then `backend/.env`.
    - Existing variables win unless override=True.
    """

    for p in env_file_candidates():
        if not p.is_file():
            continue
        try:
            content = p.read_text(encoding="utf-8")
        except OSError:
            continue
        for raw in content.splitlines():
            parsed = _parse_env_line(raw)
            if not parsed:
                continue
            k, v = parsed
            if not override and k in os.environ:
                continue
            os.environ[k] = v
