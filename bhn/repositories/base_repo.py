import uuid
from typing import Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DataError, IntegrityError, StatementError
from sqlalchemy.ext.asyncio import AsyncSession

from bhn.core.exceptions import ConstraintViolation, translate_db_error
from bhn.core.utils import LoggerMixin
from bhn.db.base import Base


ModelT = TypeVar("ModelT", bound=Base)


class ReadRepository(LoggerMixin, Generic[ModelT]):
    """
    Lookups plus the commit/translate step shared by every repository.

    Subclasses set ``model``. Lookups return None for missing rows rather
    than raising.
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    async def _commit(self, action: str) -> None:
        """
        Commit the session, translating constraint failures.

        Args:
            action: Short verb logged with the failure (e.g. "add", "delete")

        Raises:
            ConstraintViolation: The matching subclass for the failed constraint
        """
        try:
            await self.db.commit()
        except ConstraintViolation as violation:
            # Raised by a flush hook before anything reached the database
            await self.db.rollback()
            self._log_violation(violation, action)
            raise
        except (IntegrityError, DataError) as exc:
            await self.db.rollback()
            violation = translate_db_error(exc)
            self._log_violation(violation, action)
            raise violation from exc
        except StatementError as exc:
            await self.db.rollback()
            if not isinstance(exc.orig, LookupError):
                raise
            violation = translate_db_error(exc)
            self._log_violation(violation, action)
            raise violation from exc

    def _log_violation(self, violation: ConstraintViolation, action: str) -> None:
        context = violation.as_log_context()
        context["action"] = action
        context["table"] = context["table"] or self.table_name
        self.log_warning(context)

    async def get(self, id: uuid.UUID) -> Optional[ModelT]:
        """
        Get a row by primary key.

        Args:
            id: Row's unique identifier

        Returns:
            Model instance or None if not found
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def list(self, skip: int = 0, limit: int = 100) -> List[ModelT]:
        """
        Get a page of rows, newest first.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
        """
        query = (
            select(self.model)
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())


class BaseRepository(ReadRepository[ModelT]):
    """Full read/write repository. Every write commits once."""

    async def add(self, obj: ModelT) -> ModelT:
        """
        Insert a new row.

        Args:
            obj: Transient ORM instance

        Returns:
            The instance, refreshed with server-side defaults
        """
        self.db.add(obj)
        await self._commit("add")
        await self.db.refresh(obj)

        self.log_info(
            {"event_type": "row_created", "table": self.table_name, "id": str(obj.id)}
        )
        return obj

    async def add_all(self, objs: Iterable[ModelT]) -> List[ModelT]:
        """Insert several rows in one transaction."""
        objs = list(objs)
        self.db.add_all(objs)
        await self._commit("add_all")
        for obj in objs:
            await self.db.refresh(obj)

        self.log_info(
            {"event_type": "rows_created", "table": self.table_name, "count": len(objs)}
        )
        return objs

    async def update(self, obj: ModelT) -> ModelT:
        """
        Persist changes made to a loaded instance.

        Args:
            obj: Persistent ORM instance with modified attributes

        Returns:
            The refreshed instance
        """
        self.db.add(obj)
        await self._commit("update")
        await self.db.refresh(obj)

        self.log_info(
            {"event_type": "row_updated", "table": self.table_name, "id": str(obj.id)}
        )
        return obj

    async def delete(self, obj: ModelT) -> None:
        """
        Delete a row. Cascading children go with it.

        Raises:
            ForeignKeyViolation: If a non-cascading reference still points here
        """
        row_id = obj.id
        await self.db.delete(obj)
        await self._commit("delete")

        self.log_info(
            {"event_type": "row_deleted", "table": self.table_name, "id": str(row_id)}
        )

    async def delete_by_id(self, id: uuid.UUID) -> bool:
        """
        Delete a row by primary key.

        Returns:
            True if a row was deleted, False if none matched
        """
        obj = await self.get(id)
        if obj is None:
            return False
        await self.delete(obj)
        return True
