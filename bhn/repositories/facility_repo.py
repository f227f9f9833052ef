from typing import List

from sqlalchemy import select

from bhn.models.facility_model import HealthcareFacility
from bhn.repositories.base_repo import BaseRepository


class FacilityRepository(BaseRepository[HealthcareFacility]):
    """Repository layer for healthcare facility data access."""

    model = HealthcareFacility

    async def search_by_name(
        self, search: str, skip: int = 0, limit: int = 100
    ) -> List[HealthcareFacility]:
        """
        Case-insensitive substring search on facility name.

        Args:
            search: Search term
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of facility models ordered by name
        """
        search_term = f"%{search}%"
        query = (
            select(HealthcareFacility)
            .where(HealthcareFacility.name.ilike(search_term))
            .order_by(HealthcareFacility.name)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_with_emergency_services(self) -> List[HealthcareFacility]:
        result = await self.db.execute(
            select(HealthcareFacility)
            .where(HealthcareFacility.emergency_services.is_(True))
            .order_by(HealthcareFacility.name)
        )
        return list(result.scalars().all())
