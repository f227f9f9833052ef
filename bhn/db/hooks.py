"""
Write-path hooks.

Keeps ``created_at``/``updated_at`` correct for every write that goes through
the ORM, whichever backend is underneath, and checks the single-subject rule
on documents and notifications before they are flushed. PostgreSQL also has
an ``updated_at`` trigger per table (see ``bhn.db.ddl``); these hooks make
SQLite and raw ORM ``update()`` statements behave the same way.
"""
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from bhn.core.utils import logger
from bhn.models.mixins import CreatedAtMixin, TimestampMixin, utcnow
from bhn.models.subject import SubjectReferenceMixin


@event.listens_for(CreatedAtMixin, "before_insert", propagate=True)
def stamp_created(mapper, connection, target):
    now = utcnow()
    target.created_at = now
    if isinstance(target, TimestampMixin):
        target.updated_at = now


@event.listens_for(TimestampMixin, "before_update", propagate=True)
def stamp_updated(mapper, connection, target):
    state = inspect(target)
    history = state.attrs.created_at.history
    if history.has_changes():
        if history.deleted:
            target.created_at = history.deleted[0]
        else:
            # Original value was never loaded; drop the change from the UPDATE
            set_committed_value(target, "created_at", history.added[0])
        logger.log_debug(
            {
                "event_type": "created_at_change_ignored",
                "table": mapper.local_table.name,
            }
        )
    target.updated_at = utcnow()


@event.listens_for(SubjectReferenceMixin, "before_insert", propagate=True)
@event.listens_for(SubjectReferenceMixin, "before_update", propagate=True)
def check_single_subject(mapper, connection, target):
    target.check_subject()


@event.listens_for(Session, "do_orm_execute")
def stamp_bulk_updates(orm_execute_state):
    """
    Add ``updated_at = now`` to ORM ``update()`` statements.

    Applies to statements against tables that carry ``updated_at``, and
    overrides any value the caller passed for it. Bulk UPDATE by primary key
    gets ``updated_at`` merged into each parameter dict instead.
    """
    if not orm_execute_state.is_update:
        return

    statement = orm_execute_state.statement
    table = getattr(statement, "table", None)
    if table is None or "updated_at" not in table.c:
        return

    now = utcnow()
    if isinstance(orm_execute_state.parameters, list):
        return orm_execute_state.invoke_statement(
            params=[
                {**params, "updated_at": now}
                for params in orm_execute_state.parameters
            ]
        )

    orm_execute_state.statement = statement.values(updated_at=now)
