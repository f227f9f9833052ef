import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.db.types import Timestamp
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from bhn.schemas.enums import BirthStatus, Gender, birth_status_enum, coerce_enum, gender_enum

if TYPE_CHECKING:
    from bhn.models.facility_model import HealthcareFacility
    from bhn.models.provider_model import Doctor
    from bhn.models.user_model import User


class BirthRegistration(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Civil birth registration submitted for review.

    Every reference out of this table (hospital, registering user, reviewer,
    attending physician) is NO ACTION. A referenced row cannot be deleted
    while a registration still points at it.
    """

    __tablename__ = "birth_registrations"

    __table_args__ = (
        CheckConstraint(
            "apgar_score_1min BETWEEN 0 AND 10",
            name="birth_registrations_apgar_score_1min_check",
        ),
        CheckConstraint(
            "apgar_score_5min BETWEEN 0 AND 10",
            name="birth_registrations_apgar_score_5min_check",
        ),
        Index("idx_birth_registrations_bhn_id", "bhn_id"),
        Index("idx_birth_registrations_status", "registration_status"),
        Index("idx_birth_registrations_date", "birth_date"),
        Index("idx_birth_registrations_hospital", "birth_hospital_id"),
    )

    bhn_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    # Child
    child_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    child_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    child_middle_name: Mapped[Optional[str]] = mapped_column(String(100))
    child_gender: Mapped[Optional[Gender]] = mapped_column(gender_enum)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    birth_time: Mapped[Optional[time]] = mapped_column(Time)
    birth_weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    birth_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    birth_location: Mapped[Optional[str]] = mapped_column(String(255))
    birth_hospital_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("healthcare_facilities.id")
    )

    # Mother
    mother_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    mother_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    mother_maiden_name: Mapped[Optional[str]] = mapped_column(String(100))
    mother_date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    mother_place_of_birth: Mapped[Optional[str]] = mapped_column(String(255))
    mother_occupation: Mapped[Optional[str]] = mapped_column(String(100))
    mother_address: Mapped[Optional[str]] = mapped_column(Text)

    # Father
    father_first_name: Mapped[Optional[str]] = mapped_column(String(100))
    father_last_name: Mapped[Optional[str]] = mapped_column(String(100))
    father_date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    father_place_of_birth: Mapped[Optional[str]] = mapped_column(String(255))
    father_occupation: Mapped[Optional[str]] = mapped_column(String(100))
    father_address: Mapped[Optional[str]] = mapped_column(Text)

    # Registration
    registration_status: Mapped[Optional[BirthStatus]] = mapped_column(
        birth_status_enum,
        default=BirthStatus.PENDING,
        server_default=BirthStatus.PENDING.value,
    )
    registered_by_user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    reviewed_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("users.id")
    )
    approval_date: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text)
    registration_number: Mapped[Optional[str]] = mapped_column(String(50))

    # Medical
    delivery_type: Mapped[Optional[str]] = mapped_column(String(100))
    complications: Mapped[Optional[str]] = mapped_column(Text)
    apgar_score_1min: Mapped[Optional[int]] = mapped_column(Integer)
    apgar_score_5min: Mapped[Optional[int]] = mapped_column(Integer)
    attending_physician_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("doctors.id")
    )

    birth_hospital: Mapped[Optional["HealthcareFacility"]] = relationship(
        "HealthcareFacility"
    )
    registered_by: Mapped["User"] = relationship(
        "User", foreign_keys=[registered_by_user_id]
    )
    reviewed_by: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[reviewed_by_user_id]
    )
    attending_physician: Mapped[Optional["Doctor"]] = relationship("Doctor")

    def __repr__(self) -> str:
        return (
            f"<BirthRegistration id={self.id} bhn_id={self.bhn_id} "
            f"status={self.registration_status}>"
        )

    @validates("child_gender")
    def validate_child_gender(self, key, value):
        return coerce_enum(Gender, value, field=f"birth_registrations.{key}")

    @validates("registration_status")
    def validate_registration_status(self, key, value):
        return coerce_enum(BirthStatus, value, field=f"birth_registrations.{key}")

    @property
    def child_full_name(self) -> str:
        parts = [self.child_first_name, self.child_middle_name, self.child_last_name]
        return " ".join(part for part in parts if part)

    def approve(
        self, reviewer_id: uuid.UUID, registration_number: Optional[str] = None
    ) -> None:
        """
        Mark the registration approved.

        Args:
            reviewer_id: User who reviewed the registration
            registration_number: Civil registration number, if issued
        """
        self.registration_status = BirthStatus.APPROVED
        self.reviewed_by_user_id = reviewer_id
        self.approval_date = utcnow()
        self.rejection_reason = None
        if registration_number is not None:
            self.registration_number = registration_number

    def reject(self, reviewer_id: uuid.UUID, reason: str) -> None:
        """Mark the registration rejected with the reviewer's reason."""
        self.registration_status = BirthStatus.REJECTED
        self.reviewed_by_user_id = reviewer_id
        self.rejection_reason = reason
        self.approval_date = None

    def request_review(self, reviewer_id: uuid.UUID) -> None:
        self.registration_status = BirthStatus.REQUIRES_REVIEW
        self.reviewed_by_user_id = reviewer_id
