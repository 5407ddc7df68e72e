"""StaffIdentity model (agents, admins, super-admins).

The primary key is the identity provider's subject id, assigned on the first
successful provider-side creation. Rows are never deleted: deactivation flips
`user_status` to Disabled, after which lookups treat the identity as absent.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.sqltypes import Enum as SAEnum

from crm.core.base import ID_LENGTH, Base, CreatedAtMixin, UpdatedAtMixin, enum_values
from crm.domain.lifecycle import UserStatus
from crm.security.roles import Role


class StaffIdentity(CreatedAtMixin, UpdatedAtMixin, Base):
    __tablename__ = "staff_identities"

    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="staff_role", values_callable=enum_values),
        nullable=False,
    )
    user_status: Mapped[UserStatus] = mapped_column(
        SAEnum(UserStatus, name="user_status", values_callable=enum_values),
        nullable=False,
        default=UserStatus.ACTIVE,
    )

    def __repr__(self) -> str:
        return f"StaffIdentity(user_id={self.user_id!r}, role={self.role.value!r}, status={self.user_status.value!r})"
