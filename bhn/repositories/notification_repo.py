import uuid
from typing import List

from sqlalchemy import select, update

from bhn.models.mixins import utcnow
from bhn.models.notification_model import Notification
from bhn.repositories.base_repo import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository layer for in-app notifications."""

    model = Notification

    async def list_unread(self, user_id: uuid.UUID) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        """
        Mark every unread notification for a user as read.

        Args:
            user_id: Recipient's unique identifier

        Returns:
            Number of notifications updated
        """
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session="evaluate")
        )
        await self._commit("mark_all_read")

        self.log_info(
            {
                "event_type": "notifications_marked_read",
                "user_id": str(user_id),
                "count": result.rowcount,
            }
        )
        return result.rowcount
