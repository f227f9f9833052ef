from typing import List, Optional

from sqlalchemy import select

from bhn.models.provider_model import Doctor
from bhn.repositories.base_repo import BaseRepository


class DoctorRepository(BaseRepository[Doctor]):
    """Repository layer for doctor data access."""

    model = Doctor

    async def get_by_license_number(self, license_number: str) -> Optional[Doctor]:
        """
        Get doctor by license number.

        Args:
            license_number: Professional license number

        Returns:
            Doctor model or None if not found
        """
        result = await self.db.execute(
            select(Doctor).where(Doctor.license_number == license_number)
        )
        return result.scalar_one_or_none()

    async def list_accepting_new_patients(
        self, specialization: Optional[str] = None
    ) -> List[Doctor]:
        """
        Get doctors open to new patients.

        Args:
            specialization: Only return doctors with this specialization

        Returns:
            List of doctor models
        """
        query = select(Doctor).where(Doctor.accepting_new_patients.is_(True))

        if specialization:
            query = query.where(Doctor.specialization == specialization)

        result = await self.db.execute(query.order_by(Doctor.specialization))
        return list(result.scalars().all())
