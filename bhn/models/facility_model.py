from typing import Optional

from sqlalchemy import Boolean, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from bhn.db.base import Base
from bhn.db.types import JSONBType, TextArray
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class HealthcareFacility(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Hospital, clinic or other care location.

    Birth registrations, health records and appointments point here as an
    optional location. None of those references cascade.
    """

    __tablename__ = "healthcare_facilities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    facility_type: Mapped[Optional[str]] = mapped_column(String(100))
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    website: Mapped[Optional[str]] = mapped_column(Text)
    emergency_services: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    services_offered: Mapped[Optional[list]] = mapped_column(TextArray)
    operating_hours: Mapped[Optional[dict]] = mapped_column(JSONBType)

    def __repr__(self) -> str:
        return f"<HealthcareFacility id={self.id} name={self.name}>"
