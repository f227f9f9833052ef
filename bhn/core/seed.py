"""
Seed data utility

Default system settings are required by every deployment and are also
inserted by the initial migration. Development fixtures (an admin account and
one hospital) are opt-in and never run from a migration.

Both entry points are idempotent: existing rows are left untouched.
"""

from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bhn.config.config import settings
from bhn.core.security import get_password_hash
from bhn.core.utils import logger
from bhn.models.facility_model import HealthcareFacility
from bhn.models.system_setting_model import SystemSetting
from bhn.models.user_model import User
from bhn.schemas.enums import UserStatus, UserType


DEFAULT_SYSTEM_SETTINGS = [
    {
        "setting_key": "app_name",
        "setting_value": "Birth Health Network",
        "setting_type": "string",
        "description": "Application name",
        "is_public": True,
    },
    {
        "setting_key": "app_version",
        "setting_value": "1.0.0",
        "setting_type": "string",
        "description": "Current application version",
        "is_public": True,
    },
    {
        "setting_key": "maintenance_mode",
        "setting_value": "false",
        "setting_type": "boolean",
        "description": "System maintenance mode flag",
        "is_public": False,
    },
    {
        "setting_key": "max_file_upload_size",
        "setting_value": "10485760",
        "setting_type": "integer",
        "description": "Maximum file upload size in bytes (10MB)",
        "is_public": False,
    },
    {
        "setting_key": "session_timeout_minutes",
        "setting_value": "120",
        "setting_type": "integer",
        "description": "User session timeout in minutes",
        "is_public": False,
    },
    {
        "setting_key": "password_min_length",
        "setting_value": "8",
        "setting_type": "integer",
        "description": "Minimum password length requirement",
        "is_public": False,
    },
    {
        "setting_key": "email_verification_required",
        "setting_value": "true",
        "setting_type": "boolean",
        "description": "Whether email verification is required",
        "is_public": False,
    },
    {
        "setting_key": "two_factor_auth_enabled",
        "setting_value": "true",
        "setting_type": "boolean",
        "description": "Whether 2FA is enabled system-wide",
        "is_public": False,
    },
]

# Stored when no seed password is configured. Not a valid hash: the account
# cannot log in until a real password is set.
PLACEHOLDER_PASSWORD_HASH = "$2b$12$dummyhash"

DEV_FACILITY = {
    "name": "Central General Hospital",
    "facility_type": "Hospital",
    "address": "100 Health Ave",
    "city": "Toronto",
    "state": "ON",
    "zip_code": "M1A 1A1",
    "phone": "+1-416-555-1000",
}


async def create_system_setting(db: AsyncSession, **values) -> SystemSetting:
    """
    Create a system setting if it doesn't exist.

    Args:
        db: Database session
        **values: Column values; must include setting_key

    Returns:
        SystemSetting: Created or existing setting
    """
    key = values["setting_key"]
    result = await db.execute(
        select(SystemSetting).where(SystemSetting.setting_key == key)
    )
    existing_setting = result.scalar_one_or_none()

    if existing_setting:
        return existing_setting

    try:
        setting = SystemSetting(**values)
        db.add(setting)
        await db.commit()
        await db.refresh(setting)

        logger.log_info({"event_type": "system_setting_created", "setting_key": key})

        return setting
    except IntegrityError:
        await db.rollback()
        # Lost a race with another seeder; fetch the winner's row
        result = await db.execute(
            select(SystemSetting).where(SystemSetting.setting_key == key)
        )
        return result.scalar_one()


async def initialize_system_settings(db: AsyncSession) -> Dict[str, SystemSetting]:
    """
    Insert the default system settings.

    Args:
        db: Database session

    Returns:
        Dict mapping setting keys to SystemSetting objects
    """
    logger.log_info(
        {
            "event_type": "system_settings_initialization_started",
            "total_settings": len(DEFAULT_SYSTEM_SETTINGS),
        }
    )

    seeded = {}
    for values in DEFAULT_SYSTEM_SETTINGS:
        setting = await create_system_setting(db, **values)
        seeded[setting.setting_key] = setting

    logger.log_info(
        {
            "event_type": "system_settings_initialization_completed",
            "total_settings": len(seeded),
        }
    )
    return seeded


async def create_admin_user(
    db: AsyncSession, email: str, password: Optional[str] = None
) -> User:
    result = await db.execute(select(User).where(User.email == email))
    existing_user = result.scalar_one_or_none()

    if existing_user:
        return existing_user

    password_hash = (
        get_password_hash(password) if password else PLACEHOLDER_PASSWORD_HASH
    )
    if not password:
        logger.log_warning(
            {
                "event_type": "seed_admin_without_password",
                "email": email,
                "detail": "placeholder hash stored; set BHN_SEED_ADMIN_PASSWORD",
            }
        )

    try:
        user = User(
            email=email,
            password_hash=password_hash,
            user_type=UserType.ADMIN,
            status=UserStatus.ACTIVE,
            email_verified=True,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.log_info({"event_type": "seed_admin_created", "email": email})
        return user
    except IntegrityError:
        await db.rollback()
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one()


async def create_dev_facility(db: AsyncSession) -> HealthcareFacility:
    # Facility names are not unique; match on name and city
    result = await db.execute(
        select(HealthcareFacility).where(
            HealthcareFacility.name == DEV_FACILITY["name"],
            HealthcareFacility.city == DEV_FACILITY["city"],
        )
    )
    existing_facility = result.scalars().first()

    if existing_facility:
        return existing_facility

    facility = HealthcareFacility(**DEV_FACILITY)
    db.add(facility)
    await db.commit()
    await db.refresh(facility)

    logger.log_info({"event_type": "seed_facility_created", "name": facility.name})
    return facility


async def seed_development_fixtures(
    db: AsyncSession,
    admin_email: Optional[str] = None,
    admin_password: Optional[str] = None,
) -> Dict[str, object]:
    """
    Create the development admin account and test hospital.

    Args:
        db: Database session
        admin_email: Defaults to settings.SEED_ADMIN_EMAIL
        admin_password: Defaults to settings.SEED_ADMIN_PASSWORD. When neither
            is set the account gets a placeholder hash.

    Returns:
        Dict with the "admin" user and the "facility"
    """
    if settings.is_production:
        logger.log_security_event(
            {"event_type": "dev_fixtures_seeded_in_production"}
        )

    admin = await create_admin_user(
        db,
        email=admin_email or settings.SEED_ADMIN_EMAIL,
        password=admin_password or settings.SEED_ADMIN_PASSWORD,
    )
    facility = await create_dev_facility(db)

    return {"admin": admin, "facility": facility}
