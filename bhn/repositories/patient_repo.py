import uuid
from typing import List, Optional

from sqlalchemy import select

from bhn.models.health_record_model import HealthRecord, LabResult, Medication
from bhn.models.provider_model import Patient
from bhn.repositories.base_repo import BaseRepository


class PatientRepository(BaseRepository[Patient]):
    """Repository layer for patients and their clinical history."""

    model = Patient

    async def get_by_bhn_id(self, bhn_id: str) -> Optional[Patient]:
        """
        Get patient by BHN ID.

        Args:
            bhn_id: Human-facing Birth Health Network identifier

        Returns:
            Patient model or None if not found
        """
        result = await self.db.execute(select(Patient).where(Patient.bhn_id == bhn_id))
        return result.scalar_one_or_none()

    async def list_health_records(
        self, patient_id: uuid.UUID, include_confidential: bool = False
    ) -> List[HealthRecord]:
        """
        Get a patient's health records, most recent visit first.

        Args:
            patient_id: Patient's unique identifier
            include_confidential: Also return records flagged confidential

        Returns:
            List of health record models
        """
        query = select(HealthRecord).where(HealthRecord.patient_id == patient_id)

        if not include_confidential:
            # NULL counts as not confidential
            query = query.where(HealthRecord.is_confidential.isnot(True))

        query = query.order_by(HealthRecord.visit_date.desc(), HealthRecord.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_active_medications(self, patient_id: uuid.UUID) -> List[Medication]:
        result = await self.db.execute(
            select(Medication)
            .where(Medication.patient_id == patient_id, Medication.is_active.is_(True))
            .order_by(Medication.start_date.desc())
        )
        return list(result.scalars().all())

    async def list_lab_results(self, patient_id: uuid.UUID) -> List[LabResult]:
        result = await self.db.execute(
            select(LabResult)
            .where(LabResult.patient_id == patient_id)
            .order_by(LabResult.test_date.desc())
        )
        return list(result.scalars().all())
