from typing import List, Optional, Union

from sqlalchemy import select

from bhn.models.birth_registration_model import BirthRegistration
from bhn.repositories.base_repo import BaseRepository
from bhn.schemas.enums import BirthStatus, coerce_enum


class BirthRegistrationRepository(BaseRepository[BirthRegistration]):
    """Repository layer for birth registrations."""

    model = BirthRegistration

    async def get_by_bhn_id(self, bhn_id: str) -> Optional[BirthRegistration]:
        result = await self.db.execute(
            select(BirthRegistration).where(BirthRegistration.bhn_id == bhn_id)
        )
        return result.scalar_one_or_none()

    async def list_by_status(
        self,
        status: Union[BirthStatus, str],
        skip: int = 0,
        limit: int = 100,
    ) -> List[BirthRegistration]:
        """
        Get registrations in one review state, oldest submission first.

        Args:
            status: Review state to filter on
            skip: Number of records to skip
            limit: Maximum number of records to return

        Raises:
            EnumViolation: If status is not a known label
        """
        status = coerce_enum(
            BirthStatus, status, field="birth_registrations.registration_status"
        )
        query = (
            select(BirthRegistration)
            .where(BirthRegistration.registration_status == status)
            .order_by(BirthRegistration.created_at)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
