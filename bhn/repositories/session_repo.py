import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update

from bhn.models.mixins import utcnow
from bhn.models.user_model import UserSession
from bhn.repositories.base_repo import BaseRepository
from bhn.schemas.enums import SessionStatus


class SessionRepository(BaseRepository[UserSession]):
    """Repository layer for authentication sessions."""

    model = UserSession

    async def get_by_session_token(self, session_token: str) -> Optional[UserSession]:
        result = await self.db.execute(
            select(UserSession).where(UserSession.session_token == session_token)
        )
        return result.scalar_one_or_none()

    async def revoke_all_for_user(self, user_id: uuid.UUID) -> int:
        """
        Revoke every active session of a user.

        Args:
            user_id: Session owner's unique identifier

        Returns:
            Number of sessions revoked
        """
        result = await self.db.execute(
            update(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.status == SessionStatus.ACTIVE,
            )
            .values(status=SessionStatus.REVOKED)
            .execution_options(synchronize_session="evaluate")
        )
        await self._commit("revoke_all_for_user")

        self.log_security_event(
            {
                "event_type": "sessions_revoked",
                "user_id": str(user_id),
                "count": result.rowcount,
            }
        )
        return result.rowcount

    async def expire_stale(self, now: Optional[datetime] = None) -> int:
        """
        Mark active sessions past their expiry as expired.

        Args:
            now: Cut-off time, naive UTC. Defaults to the current time.

        Returns:
            Number of sessions expired
        """
        now = now or utcnow()
        result = await self.db.execute(
            update(UserSession)
            .where(
                UserSession.status == SessionStatus.ACTIVE,
                UserSession.expires_at <= now,
            )
            .values(status=SessionStatus.EXPIRED)
            .execution_options(synchronize_session="evaluate")
        )
        await self._commit("expire_stale")

        self.log_info({"event_type": "sessions_expired", "count": result.rowcount})
        return result.rowcount
