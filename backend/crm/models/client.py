"""Client profile model.

Owned by exactly one agent (`agent_id`), set at creation from the caller and
never transferred. Email and phone number are unique across all clients,
including soft-deleted ones.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.sqltypes import Enum as SAEnum

from crm.core.base import ID_LENGTH, Base, CreatedAtMixin, UpdatedAtMixin, enum_values, id_column
from crm.domain.lifecycle import ClientStatus


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class VerificationStatus(str, Enum):
    UNVERIFIED = "Unverified"
    VERIFIED = "Verified"


class Client(CreatedAtMixin, UpdatedAtMixin, Base):
    __tablename__ = "clients"

    client_id: Mapped[str] = id_column()
    agent_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False, index=True)

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[Gender] = mapped_column(
        SAEnum(Gender, name="client_gender", values_callable=enum_values),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    address: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    country: Mapped[str] = mapped_column(String(50), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(10), nullable=False)

    verification_status: Mapped[VerificationStatus] = mapped_column(
        SAEnum(VerificationStatus, name="verification_status", values_callable=enum_values),
        nullable=False,
        default=VerificationStatus.UNVERIFIED,
    )
    client_status: Mapped[ClientStatus] = mapped_column(
        SAEnum(ClientStatus, name="client_status", values_callable=enum_values),
        nullable=False,
        default=ClientStatus.ACTIVE,
    )

    @property
    def owner_id(self) -> str:
        return self.agent_id
