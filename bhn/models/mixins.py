import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from bhn.db.types import Timestamp


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UUIDPrimaryKeyMixin:
    """Random UUID primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        sort_order=-10,
    )


class CreatedAtMixin:
    """
    Insert timestamp for append-only tables.

    ``created_at`` is stamped once by the write-path hook in
    ``bhn.db.hooks`` and never changes afterwards.
    """

    created_at: Mapped[Optional[datetime]] = mapped_column(
        Timestamp,
        server_default=func.now(),
        sort_order=10,
    )


class TimestampMixin(CreatedAtMixin):
    """
    Insert and update timestamps for mutable tables.

    Every table using this mixin also gets an ``updated_at`` trigger on
    PostgreSQL (see ``bhn.db.ddl.TIMESTAMPED_TABLES``).
    """

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        Timestamp,
        server_default=func.now(),
        sort_order=10,
    )
