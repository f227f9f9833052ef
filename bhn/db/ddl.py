"""
PostgreSQL-only schema objects.

Extensions, the ``updated_at`` trigger, full-text GIN indexes, row-level
security flags and the authorization helper functions cannot be expressed as
portable table metadata. They are attached to ``Base.metadata`` here so that
``create_all`` on PostgreSQL builds the complete schema, and the SQL is
exported for the Alembic migration. On other dialects nothing here runs.
"""
from typing import List

from sqlalchemy import DDL, event

from bhn.core.access import RLS_TABLES
from bhn.core.utils import logger
from bhn.db.base import Base


EXTENSIONS = ("uuid-ossp", "pg_trgm", "btree_gin")

# Tables with an updated_at column. audit_logs and user_sessions have none.
TIMESTAMPED_TABLES = (
    "users",
    "user_profiles",
    "patients",
    "doctors",
    "healthcare_facilities",
    "birth_registrations",
    "health_records",
    "medications",
    "lab_results",
    "appointments",
    "documents",
    "notifications",
    "system_settings",
)

# name -> (table, text expression fed to to_tsvector)
SEARCH_INDEXES = {
    "idx_user_profiles_search": ("user_profiles", "first_name || ' ' || last_name"),
    "idx_health_records_search": ("health_records", "title || ' ' || description"),
}

UPDATE_UPDATED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
  NEW.updated_at = CURRENT_TIMESTAMP;
  RETURN NEW;
END;
$$ language 'plpgsql'
"""

# name -> (return type, constant returned)
PREDICATE_FUNCTIONS = {
    "current_user_id": ("UUID", "NULL"),
    "is_admin": ("BOOLEAN", "FALSE"),
    "is_healthcare_provider": ("BOOLEAN", "FALSE"),
}


def extension_statements() -> List[str]:
    return [f'CREATE EXTENSION IF NOT EXISTS "{name}"' for name in EXTENSIONS]


def trigger_name(table: str) -> str:
    return f"update_{table}_updated_at"


def trigger_statements() -> List[str]:
    """Trigger function plus one BEFORE UPDATE trigger per timestamped table."""
    statements = [UPDATE_UPDATED_AT_FUNCTION.strip()]
    for table in TIMESTAMPED_TABLES:
        statements.append(
            f"CREATE OR REPLACE TRIGGER {trigger_name(table)} BEFORE UPDATE ON {table} "
            f"FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
        )
    return statements


def drop_trigger_statements() -> List[str]:
    """Drop the triggers; run while the tables still exist."""
    return [
        f"DROP TRIGGER IF EXISTS {trigger_name(table)} ON {table}"
        for table in TIMESTAMPED_TABLES
    ]


def drop_function_statements() -> List[str]:
    statements = ["DROP FUNCTION IF EXISTS update_updated_at_column()"]
    statements.extend(
        f"DROP FUNCTION IF EXISTS {name}()" for name in PREDICATE_FUNCTIONS
    )
    return statements


def search_index_statements() -> List[str]:
    return [
        f"CREATE INDEX IF NOT EXISTS {name} ON {table} "
        f"USING gin(to_tsvector('english', {expression}))"
        for name, (table, expression) in SEARCH_INDEXES.items()
    ]


def drop_search_index_statements() -> List[str]:
    return [f"DROP INDEX IF EXISTS {name}" for name in SEARCH_INDEXES]


def row_level_security_statements() -> List[str]:
    return [f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY" for table in RLS_TABLES]


def predicate_function_statements() -> List[str]:
    return [
        f"CREATE OR REPLACE FUNCTION {name}() RETURNS {returns} AS $$\n"
        f"BEGIN\n"
        f"  RETURN {value};\n"
        f"END;\n"
        f"$$ LANGUAGE plpgsql SECURITY DEFINER"
        for name, (returns, value) in PREDICATE_FUNCTIONS.items()
    ]


def warn_rls_without_policies() -> None:
    logger.log_warning(
        {
            "event_type": "rls_enabled_without_policies",
            "tables": list(RLS_TABLES),
            "detail": "row level security is enabled but no policies are defined; "
            "authorization must be enforced by the application",
        }
    )


def _attach(event_name: str, statements: List[str]) -> None:
    for statement in statements:
        event.listen(
            Base.metadata,
            event_name,
            DDL(statement).execute_if(dialect="postgresql"),
        )


def _warn_after_create(target, connection, **kw):
    if connection.dialect.name == "postgresql":
        warn_rls_without_policies()


_attach("before_create", extension_statements())
_attach(
    "after_create",
    trigger_statements()
    + search_index_statements()
    + row_level_security_statements()
    + predicate_function_statements(),
)
# Triggers go with their tables
_attach("after_drop", drop_function_statements())
event.listen(Base.metadata, "after_create", _warn_after_create)
