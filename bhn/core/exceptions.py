"""
Constraint violation taxonomy.

Every error the schema can raise on a write falls into one of five kinds:
not-null, unique, foreign key, check and enum. ``translate_db_error`` maps a
driver-level SQLAlchemy error onto that taxonomy so callers can react to the
kind of violation without parsing backend messages themselves.
"""

import re
from typing import Iterable, Optional

from sqlalchemy.exc import DBAPIError, StatementError


# PostgreSQL SQLSTATE codes
PG_NOT_NULL_VIOLATION = "23502"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_UNIQUE_VIOLATION = "23505"
PG_CHECK_VIOLATION = "23514"
PG_INVALID_TEXT_REPRESENTATION = "22P02"
# 22P02 also covers malformed uuid/integer text
PG_ENUM_INPUT_MESSAGE = "invalid input value for enum"

_SQLITE_COLUMN_RE = re.compile(r"constraint failed: (?P<table>\w+)\.(?P<column>\w+)")


class ConstraintViolation(Exception):
    """Base class for every write rejected by a schema constraint."""

    kind = "constraint"

    def __init__(
        self,
        detail: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
        original: Optional[BaseException] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.table = table
        self.column = column
        self.original = original

    def as_log_context(self) -> dict:
        return {
            "event_type": "constraint_violation",
            "kind": self.kind,
            "table": self.table,
            "column": self.column,
            "detail": self.detail,
        }


class NotNullViolation(ConstraintViolation):
    kind = "not_null"


class UniqueViolation(ConstraintViolation):
    kind = "unique"


class ForeignKeyViolation(ConstraintViolation):
    kind = "foreign_key"


class CheckViolation(ConstraintViolation):
    kind = "check"


class EnumViolation(ConstraintViolation, ValueError):
    """Raised when a value falls outside a closed enum domain."""

    kind = "enum"

    def __init__(
        self,
        detail: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
        original: Optional[BaseException] = None,
        value: object = None,
        allowed: Iterable[str] = (),
    ):
        super().__init__(detail, table=table, column=column, original=original)
        self.value = value
        self.allowed = list(allowed)

    @classmethod
    def for_field(
        cls, field: str, value: object, allowed: Iterable[str]
    ) -> "EnumViolation":
        """Build the violation raised when assigning ``value`` to ``table.column``."""
        allowed = list(allowed)
        table, _, column = field.rpartition(".")
        return cls(
            f"Invalid value {value!r} for {field}. "
            f"Must be one of: {', '.join(allowed)}",
            table=table or None,
            column=column,
            value=value,
            allowed=allowed,
        )


class SubjectConflict(ConstraintViolation):
    """Raised when a row points at more than one subject at once."""

    kind = "subject"


_PG_CODES = {
    PG_NOT_NULL_VIOLATION: NotNullViolation,
    PG_UNIQUE_VIOLATION: UniqueViolation,
    PG_FOREIGN_KEY_VIOLATION: ForeignKeyViolation,
    PG_CHECK_VIOLATION: CheckViolation,
}

_SQLITE_PREFIXES = (
    ("NOT NULL constraint failed", NotNullViolation),
    ("UNIQUE constraint failed", UniqueViolation),
    ("FOREIGN KEY constraint failed", ForeignKeyViolation),
    ("CHECK constraint failed", CheckViolation),
)


def _sqlstate(orig: BaseException) -> Optional[str]:
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return code
    return None


def translate_db_error(exc: StatementError) -> ConstraintViolation:
    """
    Map a SQLAlchemy error raised on a write to a ConstraintViolation.

    Args:
        exc: IntegrityError, DataError or StatementError from a flush/commit

    Returns:
        The matching ConstraintViolation subclass. Unrecognised driver errors
        come back as the ConstraintViolation base class.
    """
    orig = exc.orig
    detail = str(orig) if orig is not None else str(exc)

    if isinstance(orig, LookupError):
        # validate_strings=True rejected the value before it reached the driver
        return EnumViolation(detail, original=exc)

    if isinstance(exc, DBAPIError) and orig is not None:
        code = _sqlstate(orig)
        if code == PG_INVALID_TEXT_REPRESENTATION and PG_ENUM_INPUT_MESSAGE in detail:
            return EnumViolation(detail, original=exc)
        if code in _PG_CODES:
            # asyncpg exposes the table/column on the wrapped driver exception
            source = orig.__cause__ or orig
            return _PG_CODES[code](
                detail,
                table=getattr(source, "table_name", None),
                column=getattr(source, "column_name", None),
                original=exc,
            )

    for prefix, violation_cls in _SQLITE_PREFIXES:
        if detail.startswith(prefix):
            match = _SQLITE_COLUMN_RE.search(detail)
            return violation_cls(
                detail,
                table=match.group("table") if match else None,
                column=match.group("column") if match else None,
                original=exc,
            )

    return ConstraintViolation(detail, original=exc)
