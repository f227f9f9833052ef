import uuid
from typing import List, Optional, Union

from sqlalchemy import select

from bhn.models.user_model import User, UserProfile
from bhn.repositories.base_repo import BaseRepository
from bhn.schemas.enums import UserType, coerce_enum


class UserRepository(BaseRepository[User]):
    """Repository layer for user data access."""

    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email.

        Emails are compared exactly as stored; callers normalise case before
        writing if they want case-insensitive logins.

        Args:
            email: User's email address

        Returns:
            User model or None if not found
        """
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_by_type(
        self,
        user_type: Union[UserType, str],
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        """
        Get users of one role.

        Raises:
            EnumViolation: If user_type is not a known label
        """
        user_type = coerce_enum(UserType, user_type, field="users.user_type")
        query = (
            select(User)
            .where(User.user_type == user_type)
            .order_by(User.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_profile(self, user_id: uuid.UUID) -> Optional[UserProfile]:
        """
        Get the user's profile.

        Nothing stops a second profile row for the same user; the oldest one
        is returned.
        """
        result = await self.db.execute(
            select(UserProfile)
            .where(UserProfile.user_id == user_id)
            .order_by(UserProfile.created_at)
        )
        return result.scalars().first()
