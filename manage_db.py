#!/usr/bin/env python
"""
BHN Database Management CLI

Command-line tool for creating the schema, seeding data and maintaining
settings and sessions.

Usage:
    python manage_db.py create-tables                # Create all tables from the models
    python manage_db.py seed                         # Insert default system settings
    python manage_db.py seed-dev                     # Insert development admin + hospital
    python manage_db.py list-settings                # List all system settings
    python manage_db.py get-setting <key>            # Show one setting
    python manage_db.py set-setting <key> <value>    # Change one setting
    python manage_db.py expire-sessions              # Expire past-due active sessions
"""
import asyncio
import sys

from sqlalchemy import select

from bhn.config.config import settings
from bhn.core.exceptions import ConstraintViolation
from bhn.core.seed import initialize_system_settings, seed_development_fixtures
from bhn.core.utils import configure_logging
from bhn.db.base import Base
from bhn.db.session import AsyncSessionLocal as async_session_maker
from bhn.db.session import engine
from bhn.models.system_setting_model import SystemSetting
from bhn.repositories.session_repo import SessionRepository
from bhn.repositories.system_setting_repo import SystemSettingRepository
import bhn.models  # noqa: F401


async def create_tables():
    """Create every table, enum type and PostgreSQL-only object."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print(f"Tables created ({len(Base.metadata.tables)} tables).")


async def seed_settings():
    async with async_session_maker() as db:
        seeded = await initialize_system_settings(db)
        print(f"{len(seeded)} system settings present.")


async def seed_dev():
    """Insert development fixtures."""
    if settings.is_production:
        print("Refusing to seed development fixtures in production.")
        sys.exit(1)

    async with async_session_maker() as db:
        fixtures = await seed_development_fixtures(db)
        print(f"Admin user: {fixtures['admin'].email}")
        print(f"Facility:   {fixtures['facility'].name}")


async def list_settings():
    """List all system settings."""
    async with async_session_maker() as db:
        result = await db.execute(select(SystemSetting).order_by(SystemSetting.setting_key))
        rows = result.scalars().all()

        if not rows:
            print("No settings found. Run 'python manage_db.py seed' first.")
            return

        print(f"\n{'Key':<30} {'Type':<10} {'Public':<7} {'Value':<30}")
        print("-" * 80)

        for row in rows:
            public = "yes" if row.is_public else "no"
            print(
                f"{row.setting_key:<30} {row.setting_type or '':<10} "
                f"{public:<7} {row.setting_value or '':<30}"
            )


async def get_setting(key: str):
    """Show one setting."""
    async with async_session_maker() as db:
        setting = await SystemSettingRepository(db).get_by_key(key)

        if not setting:
            print(f"Setting '{key}' not found.")
            sys.exit(1)

        print(f"\nSetting: {setting.setting_key}")
        print(f"   Value: {setting.typed_value!r}")
        print(f"   Type: {setting.setting_type}")
        print(f"   Public: {setting.is_public}")
        if setting.description:
            print(f"   Description: {setting.description}")


async def set_setting(key: str, value: str):
    """Change one setting."""
    async with async_session_maker() as db:
        try:
            setting = await SystemSettingRepository(db).set_value(key, value)
        except (ValueError, ConstraintViolation) as e:
            print(f"Error updating setting: {str(e)}")
            sys.exit(1)

        if not setting:
            print(f"Setting '{key}' not found.")
            sys.exit(1)

        print(f"Setting '{key}' set to {setting.typed_value!r}")


async def expire_sessions():
    async with async_session_maker() as db:
        count = await SessionRepository(db).expire_stale()
        print(f"{count} session(s) expired.")


def print_usage():
    """Print usage information."""
    print(__doc__)


async def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        return

    configure_logging(settings.LOG_LEVEL)
    command = sys.argv[1].lower()

    try:
        if command == "create-tables":
            await create_tables()

        elif command == "seed":
            await seed_settings()

        elif command == "seed-dev":
            await seed_dev()

        elif command == "list-settings":
            await list_settings()

        elif command == "get-setting":
            if len(sys.argv) < 3:
                print("Error: Setting key required")
                print("Usage: python manage_db.py get-setting <key>")
                return
            await get_setting(sys.argv[2])

        elif command == "set-setting":
            if len(sys.argv) < 4:
                print("Error: Setting key and value required")
                print("Usage: python manage_db.py set-setting <key> <value>")
                return
            await set_setting(sys.argv[2], sys.argv[3])

        elif command == "expire-sessions":
            await expire_sessions()

        else:
            print(f"Unknown command: {command}")
            print_usage()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
