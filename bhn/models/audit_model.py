import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, true
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from bhn.db.base import Base
from bhn.db.types import IPAddress, JSONBType
from bhn.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class AuditLog(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """
    Append-only audit trail entry.

    ``user_id`` does not cascade: a user with audit history cannot be deleted
    until the history is archived elsewhere.
    """

    __tablename__ = "audit_logs"

    __table_args__ = (
        Index("idx_audit_logs_user", "user_id"),
        Index("idx_audit_logs_action", "action"),
        Index("idx_audit_logs_resource", "resource_type", "resource_id"),
        Index("idx_audit_logs_timestamp", "created_at"),
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("users.id")
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[Optional[uuid.UUID]] = mapped_column(PGUUID(as_uuid=True))
    old_values: Mapped[Optional[dict]] = mapped_column(JSONBType)
    new_values: Mapped[Optional[dict]] = mapped_column(JSONBType)
    ip_address: Mapped[Optional[str]] = mapped_column(IPAddress)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)
    success: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text)

    def __repr__(self) -> str:
        return (
            f"<AuditLog id={self.id} action={self.action} "
            f"resource={self.resource_type}:{self.resource_id}>"
        )
