import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String, Text, false, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.db.types import IPAddress, JSONBType, Timestamp
from bhn.models.mixins import CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from bhn.schemas.enums import (
    Gender,
    SessionStatus,
    UserStatus,
    UserType,
    coerce_enum,
    gender_enum,
    session_status_enum,
    user_status_enum,
    user_type_enum,
)

if TYPE_CHECKING:
    from bhn.models.notification_model import Notification
    from bhn.models.provider_model import Doctor, Patient


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Authentication root. Profiles and role tables cascade with it."""

    __tablename__ = "users"

    __table_args__ = (
        Index("idx_users_email", "email"),
        Index("idx_users_status", "status"),
        Index("idx_users_type", "user_type"),
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_type: Mapped[UserType] = mapped_column(user_type_enum, nullable=False)
    status: Mapped[Optional[UserStatus]] = mapped_column(
        user_status_enum,
        default=UserStatus.PENDING_VERIFICATION,
        server_default=UserStatus.PENDING_VERIFICATION.value,
    )
    email_verified: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    email_verification_token: Mapped[Optional[str]] = mapped_column(String(255))
    password_reset_token: Mapped[Optional[str]] = mapped_column(String(255))
    password_reset_expires: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    last_login: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    login_attempts: Mapped[Optional[int]] = mapped_column(
        Integer, default=0, server_default="0"
    )
    locked_until: Mapped[Optional[datetime]] = mapped_column(Timestamp)
    two_factor_enabled: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    two_factor_secret: Mapped[Optional[str]] = mapped_column(String(255))

    # Cascading children: the database deletes them with the user
    profile: Mapped[Optional["UserProfile"]] = relationship(
        "UserProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    doctor: Mapped[Optional["Doctor"]] = relationship(
        "Doctor",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    patient: Mapped[Optional["Patient"]] = relationship(
        "Patient",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    sessions: Mapped[List["UserSession"]] = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notifications: Mapped[List["Notification"]] = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} type={self.user_type}>"

    @validates("user_type")
    def validate_user_type(self, key, value):
        return coerce_enum(UserType, value, field=f"users.{key}")

    @validates("status")
    def validate_status(self, key, value):
        return coerce_enum(UserStatus, value, field=f"users.{key}")

    def is_locked(self, at: Optional[datetime] = None) -> bool:
        """Check whether the login lockout window is still open."""
        if self.locked_until is None:
            return False
        return self.locked_until > (at or utcnow())

    def record_successful_login(self) -> None:
        """Stamp last login and clear the lockout counters."""
        self.last_login = utcnow()
        self.login_attempts = 0
        self.locked_until = None


class UserProfile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Demographic and contact details. One per user by convention."""

    __tablename__ = "user_profiles"

    __table_args__ = (
        Index("idx_user_profiles_user_id", "user_id"),
        Index("idx_user_profiles_name", "first_name", "last_name"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(String(100))
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    gender: Mapped[Optional[Gender]] = mapped_column(gender_enum)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    address: Mapped[Optional[str]] = mapped_column(Text)
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(50))
    zip_code: Mapped[Optional[str]] = mapped_column(String(20))
    country: Mapped[Optional[str]] = mapped_column(
        String(100), default="Canada", server_default="Canada"
    )
    emergency_contact_name: Mapped[Optional[str]] = mapped_column(String(200))
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(String(20))
    emergency_contact_relationship: Mapped[Optional[str]] = mapped_column(String(100))
    profile_image_url: Mapped[Optional[str]] = mapped_column(Text)
    timezone: Mapped[Optional[str]] = mapped_column(
        String(50), default="America/Toronto", server_default="America/Toronto"
    )
    language_preference: Mapped[Optional[str]] = mapped_column(
        String(10), default="en", server_default="en"
    )

    user: Mapped["User"] = relationship("User", back_populates="profile")

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} name={self.first_name} {self.last_name}>"

    @validates("gender")
    def validate_gender(self, key, value):
        return coerce_enum(Gender, value, field=f"user_profiles.{key}")

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(part for part in parts if part)


class UserSession(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Authentication session. Carries no updated_at column."""

    __tablename__ = "user_sessions"

    __table_args__ = (
        Index("idx_user_sessions_user", "user_id"),
        Index("idx_user_sessions_token", "session_token"),
        Index("idx_user_sessions_status", "status"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    session_token: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    refresh_token: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    device_info: Mapped[Optional[dict]] = mapped_column(JSONBType)
    ip_address: Mapped[Optional[str]] = mapped_column(IPAddress)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[Optional[SessionStatus]] = mapped_column(
        session_status_enum,
        default=SessionStatus.ACTIVE,
        server_default=SessionStatus.ACTIVE.value,
    )
    expires_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False)
    last_activity: Mapped[Optional[datetime]] = mapped_column(
        Timestamp, default=utcnow, server_default=func.now()
    )

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    def __repr__(self) -> str:
        return f"<UserSession id={self.id} user_id={self.user_id} status={self.status}>"

    @validates("status")
    def validate_status(self, key, value):
        return coerce_enum(SessionStatus, value, field=f"user_sessions.{key}")

    def is_valid(self, at: Optional[datetime] = None) -> bool:
        """Active and not past its expiry."""
        return self.status == SessionStatus.ACTIVE and self.expires_at > (at or utcnow())

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = utcnow()

    def revoke(self) -> None:
        self.status = SessionStatus.REVOKED

    def expire(self) -> None:
        self.status = SessionStatus.EXPIRED
