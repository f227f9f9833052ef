import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text, Time, false
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.db.types import Timestamp
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from bhn.schemas.enums import AppointmentStatus, appointment_status_enum, coerce_enum

if TYPE_CHECKING:
    from bhn.models.facility_model import HealthcareFacility
    from bhn.models.provider_model import Doctor, Patient


class Appointment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Scheduled visit between a patient and a doctor.

    Deleted when either the patient or the doctor is deleted.
    """

    __tablename__ = "appointments"

    __table_args__ = (
        Index("idx_appointments_patient", "patient_id"),
        Index("idx_appointments_doctor", "doctor_id"),
        Index("idx_appointments_date", "appointment_date"),
        Index("idx_appointments_status", "status"),
        Index("idx_appointments_datetime", "appointment_date", "appointment_time"),
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
    )
    facility_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("healthcare_facilities.id")
    )
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration_minutes: Mapped[Optional[int]] = mapped_column(
        Integer, default=30, server_default="30"
    )
    appointment_type: Mapped[Optional[str]] = mapped_column(String(100))
    reason: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[Optional[AppointmentStatus]] = mapped_column(
        appointment_status_enum,
        default=AppointmentStatus.SCHEDULED,
        server_default=AppointmentStatus.SCHEDULED.value,
    )
    chief_complaint: Mapped[Optional[str]] = mapped_column(Text)
    visit_notes: Mapped[Optional[str]] = mapped_column(Text)
    prescription_notes: Mapped[Optional[str]] = mapped_column(Text)
    next_appointment_recommended: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    scheduled_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("users.id")
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text)
    fee_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    payment_status: Mapped[Optional[str]] = mapped_column(
        String(50), default="pending", server_default="pending"
    )
    insurance_claim_number: Mapped[Optional[str]] = mapped_column(String(100))

    patient: Mapped["Patient"] = relationship("Patient", back_populates="appointments")
    doctor: Mapped["Doctor"] = relationship("Doctor", back_populates="appointments")
    facility: Mapped[Optional["HealthcareFacility"]] = relationship("HealthcareFacility")

    def __repr__(self) -> str:
        return (
            f"<Appointment id={self.id} date={self.appointment_date} "
            f"time={self.appointment_time} status={self.status}>"
        )

    @validates("status")
    def validate_status(self, key, value):
        return coerce_enum(AppointmentStatus, value, field=f"appointments.{key}")

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.appointment_date, self.appointment_time)

    def confirm(self) -> None:
        self.status = AppointmentStatus.CONFIRMED
        self.confirmed_at = utcnow()

    def cancel(self, reason: Optional[str] = None) -> None:
        """
        Cancel the appointment.

        Args:
            reason: Free-text cancellation reason
        """
        self.status = AppointmentStatus.CANCELLED
        self.cancelled_at = utcnow()
        self.cancellation_reason = reason
