"""
Shared test fixtures and configuration for pytest.
"""
import os

# Point the module-level engine at SQLite before bhn reads its settings
os.environ.setdefault("BHN_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid
from datetime import date, time, timedelta
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import bhn.models  # noqa: F401
from bhn.db.base import Base
from bhn.db.session import build_engine
from bhn.models.appointment_model import Appointment
from bhn.models.birth_registration_model import BirthRegistration
from bhn.models.facility_model import HealthcareFacility
from bhn.models.health_record_model import HealthRecord
from bhn.models.mixins import utcnow
from bhn.models.provider_model import Doctor, Patient
from bhn.models.user_model import User, UserSession
from bhn.schemas.enums import RecordType, UserStatus, UserType


# Test database configuration
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    In-memory SQLite engine with foreign keys enforced.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = build_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.

    Tables are created and dropped around every test by ``test_engine``.
    """
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


async def persist(db: AsyncSession, obj):
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for committed users. Emails must be unique per test."""

    async def _make_user(
        email: str = None, user_type: UserType = UserType.PATIENT, **kwargs
    ) -> User:
        user = User(
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            password_hash="$argon2id$test",
            user_type=user_type,
            **kwargs,
        )
        return await persist(db_session, user)

    return _make_user


@pytest.fixture
async def test_user(make_user) -> User:
    """Create a standard test user."""
    return await make_user(email="a@b.com", status=UserStatus.ACTIVE)


@pytest.fixture
async def doctor(db_session: AsyncSession, make_user) -> Doctor:
    user = await make_user(email="doctor@example.com", user_type=UserType.DOCTOR)
    return await persist(
        db_session,
        Doctor(
            user_id=user.id,
            license_number="LIC-0001",
            specialization="Pediatrics",
        ),
    )


@pytest.fixture
async def patient(db_session: AsyncSession, test_user: User) -> Patient:
    return await persist(db_session, Patient(user_id=test_user.id, bhn_id="BHN0001"))


@pytest.fixture
async def facility(db_session: AsyncSession) -> HealthcareFacility:
    return await persist(
        db_session,
        HealthcareFacility(
            name="Central General Hospital",
            facility_type="Hospital",
            address="100 Health Ave",
            city="Toronto",
            state="ON",
            zip_code="M1A 1A1",
        ),
    )


@pytest.fixture
async def health_record(db_session: AsyncSession, patient: Patient) -> HealthRecord:
    return await persist(
        db_session,
        HealthRecord(
            patient_id=patient.id,
            record_type=RecordType.CONSULTATION,
            title="Annual check-up",
            visit_date=date(2024, 3, 1),
        ),
    )


@pytest.fixture
async def appointment(
    db_session: AsyncSession, patient: Patient, doctor: Doctor
) -> Appointment:
    return await persist(
        db_session,
        Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=date(2024, 3, 15),
            appointment_time=time(9, 30),
        ),
    )


@pytest.fixture
async def birth_registration(
    db_session: AsyncSession, test_user: User
) -> BirthRegistration:
    return await persist(
        db_session,
        BirthRegistration(
            bhn_id="BHN-B-0001",
            child_first_name="Ada",
            child_last_name="Lovelace",
            birth_date=date(2024, 1, 10),
            mother_first_name="Anne",
            mother_last_name="Byron",
            registered_by_user_id=test_user.id,
        ),
    )


@pytest.fixture
def make_session(db_session: AsyncSession):
    """Factory for committed user sessions."""

    async def _make_session(user_id: uuid.UUID, expires_in: timedelta = timedelta(hours=2), **kwargs):
        session = UserSession(
            user_id=user_id,
            session_token=kwargs.pop("session_token", uuid.uuid4().hex),
            expires_at=utcnow() + expires_in,
            **kwargs,
        )
        return await persist(db_session, session)

    return _make_session
