import uuid
from datetime import date, time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, Time, false, true
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.db.types import JSONBType
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin
from bhn.schemas.enums import (
    RecordType,
    UrgencyLevel,
    coerce_enum,
    record_type_enum,
    urgency_level_enum,
)

if TYPE_CHECKING:
    from bhn.models.facility_model import HealthcareFacility
    from bhn.models.provider_model import Doctor, Patient


class HealthRecord(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Clinical record for one patient visit.

    Deleted with its patient. The doctor and facility references do not
    cascade.
    """

    __tablename__ = "health_records"

    __table_args__ = (
        Index("idx_health_records_patient", "patient_id"),
        Index("idx_health_records_doctor", "doctor_id"),
        Index("idx_health_records_date", "visit_date"),
        Index("idx_health_records_type", "record_type"),
        Index("idx_health_records_urgency", "urgency_level"),
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )
    doctor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("doctors.id")
    )
    facility_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("healthcare_facilities.id")
    )
    record_type: Mapped[RecordType] = mapped_column(record_type_enum, nullable=False)
    urgency_level: Mapped[Optional[UrgencyLevel]] = mapped_column(
        urgency_level_enum,
        default=UrgencyLevel.NORMAL,
        server_default=UrgencyLevel.NORMAL.value,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    diagnosis: Mapped[Optional[str]] = mapped_column(Text)
    treatment_plan: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    vital_signs: Mapped[Optional[dict]] = mapped_column(JSONBType)
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    visit_time: Mapped[Optional[time]] = mapped_column(Time)
    follow_up_date: Mapped[Optional[date]] = mapped_column(Date)
    follow_up_instructions: Mapped[Optional[str]] = mapped_column(Text)
    record_status: Mapped[Optional[str]] = mapped_column(
        String(50), default="active", server_default="active"
    )
    is_confidential: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )

    patient: Mapped["Patient"] = relationship("Patient", back_populates="health_records")
    doctor: Mapped[Optional["Doctor"]] = relationship("Doctor")
    facility: Mapped[Optional["HealthcareFacility"]] = relationship("HealthcareFacility")

    def __repr__(self) -> str:
        return f"<HealthRecord id={self.id} type={self.record_type} title={self.title}>"

    @validates("record_type")
    def validate_record_type(self, key, value):
        return coerce_enum(RecordType, value, field=f"health_records.{key}")

    @validates("urgency_level")
    def validate_urgency_level(self, key, value):
        return coerce_enum(UrgencyLevel, value, field=f"health_records.{key}")


class Medication(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Prescribed medication. Deleted with its patient."""

    __tablename__ = "medications"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )
    prescribed_by_doctor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("doctors.id")
    )
    health_record_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("health_records.id")
    )
    medication_name: Mapped[str] = mapped_column(String(255), nullable=False)
    dosage: Mapped[str] = mapped_column(String(100), nullable=False)
    frequency: Mapped[str] = mapped_column(String(100), nullable=False)
    duration: Mapped[Optional[str]] = mapped_column(String(100))
    instructions: Mapped[Optional[str]] = mapped_column(Text)
    side_effects: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    is_active: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=True, server_default=true()
    )

    patient: Mapped["Patient"] = relationship("Patient", back_populates="medications")
    prescribed_by: Mapped[Optional["Doctor"]] = relationship("Doctor")

    def __repr__(self) -> str:
        return f"<Medication id={self.id} name={self.medication_name} active={self.is_active}>"


class LabResult(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Laboratory test result. ``results`` holds the measured values."""

    __tablename__ = "lab_results"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )
    health_record_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("health_records.id")
    )
    ordered_by_doctor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("doctors.id")
    )
    test_name: Mapped[str] = mapped_column(String(255), nullable=False)
    test_type: Mapped[Optional[str]] = mapped_column(String(100))
    test_date: Mapped[date] = mapped_column(Date, nullable=False)
    results: Mapped[dict] = mapped_column(JSONBType, nullable=False)
    reference_ranges: Mapped[Optional[dict]] = mapped_column(JSONBType)
    status: Mapped[Optional[str]] = mapped_column(
        String(50), default="completed", server_default="completed"
    )
    lab_facility: Mapped[Optional[str]] = mapped_column(String(255))
    technician_notes: Mapped[Optional[str]] = mapped_column(Text)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="lab_results")
    ordered_by: Mapped[Optional["Doctor"]] = relationship("Doctor")

    def __repr__(self) -> str:
        return f"<LabResult id={self.id} test={self.test_name} date={self.test_date}>"
