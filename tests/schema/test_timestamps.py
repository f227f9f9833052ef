"""
Timestamp Tests

Tests for created_at/updated_at stamping on insert, flush-time updates and
ORM bulk update statements.
"""

import asyncio
from datetime import datetime

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bhn.models.provider_model import Patient
from bhn.models.user_model import User, UserSession
from bhn.repositories.session_repo import SessionRepository
from bhn.repositories.user_repo import UserRepository


async def reload(db: AsyncSession, model, row_id):
    result = await db.execute(
        select(model).where(model.id == row_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@pytest.mark.asyncio
@pytest.mark.unit
class TestInsertTimestamps:
    """Test timestamps assigned when a row is created."""

    async def test_created_and_updated_match_on_insert(self, test_user: User):
        """Test a new row starts with created_at equal to updated_at."""
        assert test_user.created_at is not None
        assert test_user.created_at == test_user.updated_at

    async def test_session_has_only_created_at(self, test_user: User, make_session):
        """Test tables without updated_at still get created_at."""
        session = await make_session(test_user.id)

        assert session.created_at is not None
        assert not hasattr(UserSession, "updated_at")


@pytest.mark.asyncio
@pytest.mark.unit
class TestUpdateTimestamps:
    """Test updated_at moves forward and created_at stays put."""

    async def test_update_advances_updated_at(
        self, db_session: AsyncSession, test_user: User
    ):
        """Test modifying a row refreshes updated_at."""
        created_at = test_user.created_at
        before = test_user.updated_at
        await asyncio.sleep(0.01)

        test_user.login_attempts = 3
        await UserRepository(db_session).update(test_user)

        assert test_user.updated_at > before
        assert test_user.created_at == created_at

    async def test_created_at_cannot_be_rewritten(
        self, db_session: AsyncSession, test_user: User
    ):
        """Test an explicit change to created_at is discarded on update."""
        created_at = test_user.created_at
        await asyncio.sleep(0.01)

        test_user.created_at = datetime(2000, 1, 1)
        test_user.email_verified = True
        await UserRepository(db_session).update(test_user)

        stored = await reload(db_session, User, test_user.id)
        assert stored.created_at == created_at
        assert stored.email_verified is True

    async def test_caller_supplied_updated_at_is_overridden(
        self, db_session: AsyncSession, patient: Patient
    ):
        """Test updated_at always reflects the time of the write."""
        await asyncio.sleep(0.01)

        patient.allergies = "penicillin"
        patient.updated_at = datetime(2000, 1, 1)
        await db_session.commit()

        stored = await reload(db_session, Patient, patient.id)
        assert stored.updated_at > stored.created_at


@pytest.mark.asyncio
@pytest.mark.unit
class TestBulkUpdateTimestamps:
    """Test ORM update() statements stamp updated_at as well."""

    async def test_bulk_update_sets_updated_at(
        self, db_session: AsyncSession, test_user: User
    ):
        """Test update(User) advances updated_at without naming it."""
        user_id, before = test_user.id, test_user.updated_at
        await asyncio.sleep(0.01)

        await db_session.execute(
            update(User).where(User.id == user_id).values(login_attempts=5)
        )
        await db_session.commit()

        stored = await reload(db_session, User, user_id)
        assert stored.login_attempts == 5
        assert stored.updated_at > before

    async def test_bulk_update_overrides_updated_at(
        self, db_session: AsyncSession, test_user: User
    ):
        """Test a caller-supplied updated_at in update() is replaced."""
        user_id = test_user.id

        await db_session.execute(
            update(User)
            .where(User.id == user_id)
            .values(two_factor_enabled=True, updated_at=datetime(2000, 1, 1))
        )
        await db_session.commit()

        stored = await reload(db_session, User, user_id)
        assert stored.updated_at != datetime(2000, 1, 1)
        assert stored.updated_at >= stored.created_at

    async def test_bulk_update_without_updated_at_column(
        self, db_session: AsyncSession, test_user: User, make_session
    ):
        """Test bulk updates on tables without updated_at are left alone."""
        await make_session(test_user.id)
        await make_session(test_user.id)

        revoked = await SessionRepository(db_session).revoke_all_for_user(test_user.id)

        assert revoked == 2

    async def test_bulk_update_by_primary_key(
        self, db_session: AsyncSession, make_user
    ):
        """Test update(User) with a list of parameter dicts stamps every row."""
        first, second = await make_user(), await make_user()
        before = {first.id: first.updated_at, second.id: second.updated_at}
        await asyncio.sleep(0.01)

        await db_session.execute(
            update(User),
            [
                {"id": first.id, "login_attempts": 7},
                {"id": second.id, "login_attempts": 2, "updated_at": datetime(2000, 1, 1)},
            ],
        )
        await db_session.commit()

        for user_id, attempts in ((first.id, 7), (second.id, 2)):
            stored = await reload(db_session, User, user_id)
            assert stored.login_attempts == attempts
            assert stored.updated_at > before[user_id]
