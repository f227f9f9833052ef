"""
Authorization predicates.

These mirror the SQL helper functions installed on PostgreSQL. Both sides
are placeholders: they return fixed values and row-level security is enabled
on ``RLS_TABLES`` without any policy. Access control is the calling
application's job until real predicates are written.
"""
import uuid
from typing import Optional


# Tables that get ENABLE ROW LEVEL SECURITY on PostgreSQL
RLS_TABLES = (
    "users",
    "user_profiles",
    "patients",
    "doctors",
    "health_records",
    "appointments",
    "documents",
    "notifications",
)


def current_user_id() -> Optional[uuid.UUID]:
    """Id of the authenticated user. Always None for now."""
    return None


def is_admin() -> bool:
    return False


def is_healthcare_provider() -> bool:
    return False
