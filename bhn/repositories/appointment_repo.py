import uuid
from datetime import date
from typing import List, Optional, Union

from sqlalchemy import select

from bhn.models.appointment_model import Appointment
from bhn.repositories.base_repo import BaseRepository
from bhn.schemas.enums import AppointmentStatus, coerce_enum


class AppointmentRepository(BaseRepository[Appointment]):
    """Repository layer for appointment scheduling data."""

    model = Appointment

    async def list_for_doctor_on(
        self, doctor_id: uuid.UUID, day: date
    ) -> List[Appointment]:
        """
        Get a doctor's appointments for one day in time order.

        Args:
            doctor_id: Doctor's unique identifier
            day: Calendar date of the appointments

        Returns:
            List of appointment models
        """
        result = await self.db.execute(
            select(Appointment)
            .where(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == day,
            )
            .order_by(Appointment.appointment_time)
        )
        return list(result.scalars().all())

    async def list_for_patient(
        self,
        patient_id: uuid.UUID,
        status: Optional[Union[AppointmentStatus, str]] = None,
    ) -> List[Appointment]:
        """
        Get a patient's appointments, latest first.

        Args:
            patient_id: Patient's unique identifier
            status: Only return appointments in this state

        Returns:
            List of appointment models
        """
        query = select(Appointment).where(Appointment.patient_id == patient_id)

        if status is not None:
            status = coerce_enum(AppointmentStatus, status, field="appointments.status")
            query = query.where(Appointment.status == status)

        query = query.order_by(
            Appointment.appointment_date.desc(), Appointment.appointment_time.desc()
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
