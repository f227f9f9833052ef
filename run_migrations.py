#!/usr/bin/env python
"""
BHN schema migrations.

Usage:
    python run_migrations.py upgrade [revision]     # Apply migrations (default: head)
    python run_migrations.py downgrade [revision]   # Roll back (default: one step)
    python run_migrations.py sql [revision]         # Print upgrade SQL without running it
    python run_migrations.py stamp <revision>       # Mark an existing schema as migrated
    python run_migrations.py current                # Show the applied revision
    python run_migrations.py history                # Show migration history
    python run_migrations.py create "message"       # Autogenerate a new revision
"""
import os
import sys

from alembic import command
from alembic.config import Config
from alembic.util import CommandError
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from bhn.config.config import settings


ALEMBIC_INI = os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini")

MIGRATION_ERRORS = (CommandError, SQLAlchemyError, OSError)


def target_database() -> str:
    return make_url(settings.DATABASE_URL).render_as_string(hide_password=True)


def upgrade(cfg: Config, revision: str = "head"):
    print(f"Upgrading {target_database()} to: {revision}")
    command.upgrade(cfg, revision)
    print("Database upgraded successfully")


def downgrade(cfg: Config, revision: str = "-1"):
    print(f"Downgrading {target_database()} to: {revision}")
    command.downgrade(cfg, revision)
    print("Database downgraded successfully")


def sql(cfg: Config, revision: str = "head"):
    command.upgrade(cfg, revision, sql=True)


def stamp(cfg: Config, revision: str):
    """Record a revision as applied without running it."""
    command.stamp(cfg, revision)
    print(f"Database stamped at: {revision}")


def current(cfg: Config):
    command.current(cfg, verbose=True)


def history(cfg: Config):
    command.history(cfg)


def create(cfg: Config, message: str):
    command.revision(cfg, message=message, autogenerate=True)
    print(f"Migration '{message}' created")
    print("   Review it, then run 'python run_migrations.py upgrade'")


# name -> (handler, required argument count, maximum argument count)
COMMANDS = {
    "upgrade": (upgrade, 0, 1),
    "downgrade": (downgrade, 0, 1),
    "sql": (sql, 0, 1),
    "stamp": (stamp, 1, 1),
    "current": (current, 0, 0),
    "history": (history, 0, 0),
    "create": (create, 1, 1),
}


def main():
    if len(sys.argv) < 2 or sys.argv[1].lower() not in COMMANDS:
        if len(sys.argv) >= 2:
            print(f"Unknown action: {sys.argv[1]}")
        print(__doc__)
        sys.exit(1)

    action = sys.argv[1].lower()
    handler, required, maximum = COMMANDS[action]
    args = sys.argv[2:]
    if not required <= len(args) <= maximum:
        print(f"Error: wrong number of arguments for '{action}'")
        print(__doc__)
        sys.exit(1)

    try:
        handler(Config(ALEMBIC_INI), *args)
    except MIGRATION_ERRORS as e:
        print(f"Error running '{action}': {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
