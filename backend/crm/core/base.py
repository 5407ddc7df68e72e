"""SQLAlchemy declarative base and shared mixins.

- String UUID primary keys: ids are opaque values compared by raw equality, and
  staff ids come from the identity provider rather than the database.
- Timezone-aware timestamps for audit timelines.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


ID_LENGTH = 36


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class CreatedAtMixin:
    """Created-at timestamp mixin."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class UpdatedAtMixin:
    """Updated-at timestamp mixin. Only for mutable tables."""

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=func.now(),
    )


def id_column(**kwargs) -> Mapped[str]:
    """String(36) primary key; application-generated unless a default is overridden."""
    kwargs.setdefault("default", new_id)
    return mapped_column(String(ID_LENGTH), primary_key=True, **kwargs)


def enum_values(enum_cls) -> list[str]:
    """Persist str-Enums by value ("Active") rather than member name ("ACTIVE")."""
    return [member.value for member in enum_cls]
