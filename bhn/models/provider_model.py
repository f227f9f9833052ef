import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text, true
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.db.types import JSONBType, TextArray
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin
from bhn.schemas.enums import BloodType, blood_type_enum, coerce_enum

if TYPE_CHECKING:
    from bhn.models.appointment_model import Appointment
    from bhn.models.health_record_model import HealthRecord, LabResult, Medication
    from bhn.models.user_model import User


class Doctor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Doctor-specific extension of a user."""

    __tablename__ = "doctors"

    __table_args__ = (
        Index("idx_doctors_user_id", "user_id"),
        Index("idx_doctors_license", "license_number"),
        Index("idx_doctors_specialization", "specialization"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    license_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    specialization: Mapped[str] = mapped_column(String(200), nullable=False)
    sub_specialties: Mapped[Optional[list]] = mapped_column(TextArray)
    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer)
    education: Mapped[Optional[str]] = mapped_column(Text)
    certifications: Mapped[Optional[str]] = mapped_column(Text)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    hospital_affiliations: Mapped[Optional[dict]] = mapped_column(JSONBType)
    office_hours: Mapped[Optional[dict]] = mapped_column(JSONBType)
    accepting_new_patients: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    consultation_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    languages_spoken: Mapped[Optional[list]] = mapped_column(TextArray)

    user: Mapped["User"] = relationship("User", back_populates="doctor")

    # Appointments cascade with the doctor. Patients naming this doctor as
    # primary do not: deleting the doctor fails while they exist.
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment",
        back_populates="doctor",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Doctor id={self.id} license={self.license_number}>"


class Patient(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Patient-specific extension of a user.

    ``bhn_id`` is the human-facing Birth Health Network identifier. It is
    unique system-wide and distinct from the internal primary key.
    """

    __tablename__ = "patients"

    __table_args__ = (
        Index("idx_patients_user_id", "user_id"),
        Index("idx_patients_bhn_id", "bhn_id"),
        Index("idx_patients_primary_doctor", "primary_doctor_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    bhn_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    blood_type: Mapped[Optional[BloodType]] = mapped_column(
        blood_type_enum,
        default=BloodType.UNKNOWN,
        server_default=BloodType.UNKNOWN.value,
    )
    allergies: Mapped[Optional[str]] = mapped_column(Text)
    current_medications: Mapped[Optional[str]] = mapped_column(Text)
    medical_conditions: Mapped[Optional[str]] = mapped_column(Text)
    insurance_provider: Mapped[Optional[str]] = mapped_column(String(200))
    insurance_number: Mapped[Optional[str]] = mapped_column(String(100))
    insurance_group_number: Mapped[Optional[str]] = mapped_column(String(100))
    # No ON DELETE action: readers must handle a doctor that cannot be found
    primary_doctor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("doctors.id"),
    )
    preferred_pharmacy: Mapped[Optional[str]] = mapped_column(Text)
    medical_history: Mapped[Optional[dict]] = mapped_column(JSONBType)
    family_history: Mapped[Optional[dict]] = mapped_column(JSONBType)

    user: Mapped["User"] = relationship("User", back_populates="patient")
    primary_doctor: Mapped[Optional["Doctor"]] = relationship(
        "Doctor", foreign_keys=[primary_doctor_id]
    )

    health_records: Mapped[List["HealthRecord"]] = relationship(
        "HealthRecord",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    medications: Mapped[List["Medication"]] = relationship(
        "Medication",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    lab_results: Mapped[List["LabResult"]] = relationship(
        "LabResult",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Patient id={self.id} bhn_id={self.bhn_id}>"

    @validates("blood_type")
    def validate_blood_type(self, key, value):
        return coerce_enum(BloodType, value, field=f"patients.{key}")
