"""
Repository Tests

Tests for lookups, filtered listings and bulk state changes in the
repository layer.
"""

import asyncio
import uuid
from datetime import date, time, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from bhn.models.appointment_model import Appointment
from bhn.models.birth_registration_model import BirthRegistration
from bhn.models.facility_model import HealthcareFacility
from bhn.models.health_record_model import HealthRecord, LabResult, Medication
from bhn.models.mixins import utcnow
from bhn.models.notification_model import Notification
from bhn.models.system_setting_model import SystemSetting
from bhn.models.user_model import User, UserProfile
from bhn.repositories import (
    AppointmentRepository,
    AuditLogRepository,
    BirthRegistrationRepository,
    DoctorRepository,
    FacilityRepository,
    NotificationRepository,
    PatientRepository,
    SessionRepository,
    SystemSettingRepository,
    UserRepository,
)
from bhn.schemas.enums import (
    AppointmentStatus,
    BirthStatus,
    NotificationType,
    RecordType,
    SessionStatus,
    UserType,
)


@pytest.mark.asyncio
@pytest.mark.unit
class TestUserRepository:
    """Test user lookups."""

    async def test_get_by_email(self, db_session: AsyncSession, test_user: User):
        user = await UserRepository(db_session).get_by_email("a@b.com")

        assert user is not None
        assert user.id == test_user.id

    async def test_get_by_email_is_exact(self, db_session: AsyncSession, test_user: User):
        """Test email lookups do not fold case."""
        assert await UserRepository(db_session).get_by_email("A@B.COM") is None

    async def test_get_missing(self, db_session: AsyncSession):
        assert await UserRepository(db_session).get(uuid.uuid4()) is None

    async def test_list_by_type(self, db_session: AsyncSession, make_user):
        await make_user(user_type=UserType.NURSE)
        await make_user(user_type=UserType.NURSE)
        await make_user(user_type=UserType.ADMIN)

        nurses = await UserRepository(db_session).list_by_type("nurse")

        assert len(nurses) == 2
        assert all(user.user_type is UserType.NURSE for user in nurses)

    async def test_list_newest_first(self, db_session: AsyncSession, make_user):
        first = await make_user()
        await asyncio.sleep(0.01)
        second = await make_user()

        users = await UserRepository(db_session).list()

        assert [u.id for u in users] == [second.id, first.id]

    async def test_list_pagination(self, db_session: AsyncSession, make_user):
        for _ in range(3):
            await make_user()

        page = await UserRepository(db_session).list(skip=1, limit=1)

        assert len(page) == 1

    async def test_get_profile_returns_oldest(
        self, db_session: AsyncSession, test_user: User
    ):
        """Test the first profile wins when a user has two."""
        repo = UserRepository(db_session)
        db_session.add(UserProfile(user_id=test_user.id, first_name="First", last_name="X"))
        await db_session.commit()
        await asyncio.sleep(0.01)
        db_session.add(UserProfile(user_id=test_user.id, first_name="Second", last_name="X"))
        await db_session.commit()

        profile = await repo.get_profile(test_user.id)

        assert profile.first_name == "First"

    async def test_get_profile_missing(self, db_session: AsyncSession, test_user: User):
        assert await UserRepository(db_session).get_profile(test_user.id) is None


@pytest.mark.asyncio
@pytest.mark.unit
class TestPatientRepository:
    """Test patient lookups and clinical history listings."""

    async def test_get_by_bhn_id(self, db_session: AsyncSession, patient):
        found = await PatientRepository(db_session).get_by_bhn_id("BHN0001")

        assert found.id == patient.id

    async def test_get_by_unknown_bhn_id(self, db_session: AsyncSession):
        assert await PatientRepository(db_session).get_by_bhn_id("BHN9999") is None

    async def test_confidential_records_hidden_by_default(
        self, db_session: AsyncSession, patient, health_record
    ):
        db_session.add(
            HealthRecord(
                patient_id=patient.id,
                record_type=RecordType.MENTAL_HEALTH,
                title="Counselling",
                visit_date=date(2024, 4, 1),
                is_confidential=True,
            )
        )
        await db_session.commit()
        repo = PatientRepository(db_session)

        default = await repo.list_health_records(patient.id)
        everything = await repo.list_health_records(patient.id, include_confidential=True)

        assert [r.id for r in default] == [health_record.id]
        assert len(everything) == 2
        assert everything[0].visit_date == date(2024, 4, 1)

    async def test_active_medications(self, db_session: AsyncSession, patient):
        common = dict(patient_id=patient.id, dosage="5mg", frequency="daily")
        db_session.add_all(
            [
                Medication(medication_name="Iron", start_date=date(2024, 1, 1), **common),
                Medication(
                    medication_name="Folic acid",
                    start_date=date(2023, 6, 1),
                    is_active=False,
                    **common,
                ),
            ]
        )
        await db_session.commit()

        active = await PatientRepository(db_session).list_active_medications(patient.id)

        assert [m.medication_name for m in active] == ["Iron"]

    async def test_lab_results_latest_first(self, db_session: AsyncSession, patient):
        for day in (1, 20):
            db_session.add(
                LabResult(
                    patient_id=patient.id,
                    test_name="Glucose",
                    test_date=date(2024, 5, day),
                    results={"mmol_l": 5.1},
                )
            )
        await db_session.commit()

        results = await PatientRepository(db_session).list_lab_results(patient.id)

        assert [r.test_date.day for r in results] == [20, 1]
        assert results[0].results == {"mmol_l": 5.1}
        assert results[0].status == "completed"


@pytest.mark.asyncio
@pytest.mark.unit
class TestDoctorAndFacilityRepositories:
    async def test_get_by_license_number(self, db_session: AsyncSession, doctor):
        found = await DoctorRepository(db_session).get_by_license_number("LIC-0001")

        assert found.id == doctor.id

    async def test_accepting_new_patients(self, db_session: AsyncSession, doctor):
        repo = DoctorRepository(db_session)

        assert [d.id for d in await repo.list_accepting_new_patients()] == [doctor.id]
        assert await repo.list_accepting_new_patients(specialization="Cardiology") == []

        doctor.accepting_new_patients = False
        await repo.update(doctor)
        assert await repo.list_accepting_new_patients() == []

    async def test_search_by_name(self, db_session: AsyncSession, facility):
        repo = FacilityRepository(db_session)

        assert [f.id for f in await repo.search_by_name("general")] == [facility.id]
        assert await repo.search_by_name("clinic") == []

    async def test_emergency_services(self, db_session: AsyncSession, facility):
        repo = FacilityRepository(db_session)
        er = await repo.add(
            HealthcareFacility(
                name="Lakeshore Emergency",
                address="1 Lake Rd",
                city="Toronto",
                state="ON",
                zip_code="M2B 2B2",
                emergency_services=True,
            )
        )

        assert [f.id for f in await repo.list_with_emergency_services()] == [er.id]


@pytest.mark.asyncio
@pytest.mark.unit
class TestBirthRegistrationRepository:
    async def test_get_by_bhn_id(self, db_session: AsyncSession, birth_registration):
        found = await BirthRegistrationRepository(db_session).get_by_bhn_id("BHN-B-0001")

        assert found.id == birth_registration.id

    async def test_list_by_status_follows_review(
        self, db_session: AsyncSession, birth_registration: BirthRegistration, make_user
    ):
        """Test approved registrations leave the pending queue."""
        repo = BirthRegistrationRepository(db_session)
        reviewer = await make_user(user_type=UserType.HOSPITAL_STAFF)

        assert len(await repo.list_by_status(BirthStatus.PENDING)) == 1

        birth_registration.approve(reviewer.id)
        await repo.update(birth_registration)

        assert await repo.list_by_status("pending") == []
        approved = await repo.list_by_status("approved")
        assert approved[0].reviewed_by_user_id == reviewer.id
        assert approved[0].approval_date is not None


@pytest.mark.asyncio
@pytest.mark.unit
class TestAppointmentRepository:
    async def test_doctor_day_in_time_order(
        self, db_session: AsyncSession, appointment: Appointment, patient, doctor
    ):
        repo = AppointmentRepository(db_session)
        early = await repo.add(
            Appointment(
                patient_id=patient.id,
                doctor_id=doctor.id,
                appointment_date=date(2024, 3, 15),
                appointment_time=time(8, 0),
            )
        )

        day = await repo.list_for_doctor_on(doctor.id, date(2024, 3, 15))

        assert [a.id for a in day] == [early.id, appointment.id]
        assert await repo.list_for_doctor_on(doctor.id, date(2024, 3, 16)) == []

    async def test_patient_by_status(
        self, db_session: AsyncSession, appointment: Appointment, patient
    ):
        repo = AppointmentRepository(db_session)
        appointment.cancel("Rescheduled")
        await repo.update(appointment)

        assert await repo.list_for_patient(patient.id, status=AppointmentStatus.SCHEDULED) == []
        cancelled = await repo.list_for_patient(patient.id, status="cancelled")
        assert cancelled[0].cancellation_reason == "Rescheduled"
        assert len(await repo.list_for_patient(patient.id)) == 1


@pytest.mark.asyncio
@pytest.mark.unit
class TestNotificationRepository:
    async def test_mark_all_read(self, db_session: AsyncSession, test_user: User, make_user):
        other = await make_user()
        for user_id in (test_user.id, test_user.id, other.id):
            db_session.add(
                Notification(
                    user_id=user_id,
                    notification_type=NotificationType.SYSTEM_ALERT,
                    title="Alert",
                    message="Check your inbox",
                )
            )
        await db_session.commit()
        repo = NotificationRepository(db_session)

        assert len(await repo.list_unread(test_user.id)) == 2
        assert await repo.mark_all_read(test_user.id) == 2

        assert await repo.list_unread(test_user.id) == []
        assert len(await repo.list_unread(other.id)) == 1


@pytest.mark.asyncio
@pytest.mark.unit
class TestSessionRepository:
    """Test session lookup, revocation and expiry sweeps."""

    async def test_get_by_session_token(self, db_session: AsyncSession, test_user, make_session):
        session = await make_session(test_user.id, session_token="abc123")

        found = await SessionRepository(db_session).get_by_session_token("abc123")

        assert found.id == session.id

    async def test_revoke_all_for_user(self, db_session: AsyncSession, test_user, make_session):
        active = await make_session(test_user.id)
        await make_session(test_user.id, status=SessionStatus.EXPIRED)
        repo = SessionRepository(db_session)

        assert await repo.revoke_all_for_user(test_user.id) == 1

        stored = await repo.get(active.id)
        assert stored.status is SessionStatus.REVOKED

    async def test_expire_stale(self, db_session: AsyncSession, test_user, make_session):
        stale = await make_session(test_user.id, expires_in=timedelta(minutes=-5))
        fresh = await make_session(test_user.id)
        repo = SessionRepository(db_session)

        assert await repo.expire_stale() == 1

        assert (await repo.get(stale.id)).status is SessionStatus.EXPIRED
        assert (await repo.get(fresh.id)).status is SessionStatus.ACTIVE

    async def test_expire_stale_with_cutoff(
        self, db_session: AsyncSession, test_user, make_session
    ):
        await make_session(test_user.id)

        expired = await SessionRepository(db_session).expire_stale(
            now=utcnow() + timedelta(days=1)
        )

        assert expired == 1


@pytest.mark.asyncio
@pytest.mark.unit
class TestSystemSettingRepository:
    """Test typed reads and writes of system settings."""

    @pytest.fixture
    async def settings_rows(self, db_session: AsyncSession):
        db_session.add_all(
            [
                SystemSetting(
                    setting_key="maintenance_mode",
                    setting_value="false",
                    setting_type="boolean",
                ),
                SystemSetting(
                    setting_key="password_min_length",
                    setting_value="8",
                    setting_type="integer",
                ),
                SystemSetting(
                    setting_key="app_name",
                    setting_value="Birth Health Network",
                    is_public=True,
                ),
            ]
        )
        await db_session.commit()

    async def test_get_value_typed(self, db_session: AsyncSession, settings_rows):
        repo = SystemSettingRepository(db_session)

        assert await repo.get_value("maintenance_mode") is False
        assert await repo.get_value("password_min_length") == 8
        assert await repo.get_value("app_name") == "Birth Health Network"

    async def test_get_value_default(self, db_session: AsyncSession):
        assert await SystemSettingRepository(db_session).get_value("missing", 42) == 42

    async def test_set_value(self, db_session: AsyncSession, settings_rows):
        repo = SystemSettingRepository(db_session)

        setting = await repo.set_value("maintenance_mode", True)

        assert setting.setting_value == "true"
        assert await repo.get_value("maintenance_mode") is True

    async def test_set_value_unknown_key(self, db_session: AsyncSession):
        assert await SystemSettingRepository(db_session).set_value("missing", "x") is None

    async def test_set_value_wrong_type(self, db_session: AsyncSession, settings_rows):
        """Test a non-numeric value for an integer setting is refused."""
        repo = SystemSettingRepository(db_session)

        with pytest.raises(ValueError):
            await repo.set_value("password_min_length", "eight")

        await db_session.rollback()
        assert await repo.get_value("password_min_length") == 8

    async def test_set_bool_on_integer_setting(
        self, db_session: AsyncSession, settings_rows
    ):
        """Test True is refused for an integer setting and the old value stays readable."""
        repo = SystemSettingRepository(db_session)

        with pytest.raises(ValueError):
            await repo.set_value("password_min_length", True)

        await db_session.rollback()
        assert await repo.get_value("password_min_length") == 8

    async def test_list_public(self, db_session: AsyncSession, settings_rows):
        public = await SystemSettingRepository(db_session).list_public()

        assert [s.setting_key for s in public] == ["app_name"]


@pytest.mark.asyncio
@pytest.mark.unit
class TestAuditLogRepository:
    """Test the append-only audit trail."""

    async def test_append_and_list(self, db_session: AsyncSession, test_user, patient):
        repo = AuditLogRepository(db_session)
        await repo.append(
            "update",
            "patient",
            resource_id=patient.id,
            user_id=test_user.id,
            old_values={"allergies": None},
            new_values={"allergies": "latex"},
            ip_address="10.0.0.5",
        )
        await asyncio.sleep(0.01)
        await repo.append("view", "patient", resource_id=patient.id, success=False,
                          error_message="forbidden")

        trail = await repo.list_for_resource("patient", patient.id)

        assert [entry.action for entry in trail] == ["update", "view"]
        assert trail[0].new_values == {"allergies": "latex"}
        assert trail[0].ip_address == "10.0.0.5"
        assert trail[1].success is False

    async def test_no_update_or_delete(self, db_session: AsyncSession):
        repo = AuditLogRepository(db_session)

        assert not hasattr(repo, "update")
        assert not hasattr(repo, "delete")
