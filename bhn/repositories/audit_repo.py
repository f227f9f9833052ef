import uuid
from typing import List, Optional

from sqlalchemy import select

from bhn.models.audit_model import AuditLog
from bhn.repositories.base_repo import ReadRepository


class AuditLogRepository(ReadRepository[AuditLog]):
    """
    Append-only access to the audit trail.

    Entries are written once and only read afterwards, so there is no update
    or delete.
    """

    model = AuditLog

    async def append(
        self,
        action: str,
        resource_type: str,
        resource_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> AuditLog:
        """
        Write one audit entry.

        Args:
            action: What happened (e.g. "update")
            resource_type: Kind of record acted on (e.g. "patient")
            resource_id: Id of the record acted on
            user_id: Acting user, if known

        Returns:
            The stored entry
        """
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            user_id=user_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent,
            success=success,
            error_message=error_message,
        )
        self.db.add(entry)
        await self._commit("append")
        await self.db.refresh(entry)
        return entry

    async def list_for_resource(
        self, resource_type: str, resource_id: Optional[uuid.UUID] = None
    ) -> List[AuditLog]:
        """Get the audit trail for a resource type, or one resource, oldest first."""
        query = select(AuditLog).where(AuditLog.resource_type == resource_type)

        if resource_id is not None:
            query = query.where(AuditLog.resource_id == resource_id)

        result = await self.db.execute(query.order_by(AuditLog.created_at))
        return list(result.scalars().all())
