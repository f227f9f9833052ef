import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.db.types import Timestamp
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from bhn.models.subject import SubjectKind, SubjectReferenceMixin
from bhn.schemas.enums import NotificationType, coerce_enum, notification_type_enum

if TYPE_CHECKING:
    from bhn.models.user_model import User


class Notification(SubjectReferenceMixin, UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    In-app notification for a user.

    Delivery flags only record what the delivering service reported; nothing
    here sends email, SMS or push messages.
    """

    __tablename__ = "notifications"

    __subject_columns__ = {
        SubjectKind.APPOINTMENT: "related_appointment_id",
        SubjectKind.HEALTH_RECORD: "related_health_record_id",
        SubjectKind.BIRTH_REGISTRATION: "related_birth_registration_id",
    }

    __table_args__ = (
        Index("idx_notifications_user", "user_id"),
        Index("idx_notifications_type", "notification_type"),
        Index(
            "idx_notifications_unread",
            "user_id",
            "is_read",
            postgresql_where=text("is_read = false"),
            sqlite_where=text("is_read = 0"),
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    notification_type: Mapped[NotificationType] = mapped_column(
        notification_type_enum, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    action_url: Mapped[Optional[str]] = mapped_column(Text)
    is_read: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    read_at: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    related_appointment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("appointments.id")
    )
    related_health_record_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("health_records.id")
    )
    related_birth_registration_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("birth_registrations.id")
    )
    email_sent: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    sms_sent: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    push_sent: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(Timestamp)

    user: Mapped["User"] = relationship("User", back_populates="notifications")

    def __repr__(self) -> str:
        return (
            f"<Notification id={self.id} type={self.notification_type} "
            f"read={self.is_read}>"
        )

    @validates("notification_type")
    def validate_notification_type(self, key, value):
        return coerce_enum(NotificationType, value, field=f"notifications.{key}")

    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = utcnow()
