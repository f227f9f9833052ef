"""
Referential Integrity Tests

Tests for cascade deletes, non-cascading references, uniqueness, not-null
and check constraints.
"""

import uuid
from datetime import date, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bhn.core.exceptions import (
    CheckViolation,
    ForeignKeyViolation,
    NotNullViolation,
    UniqueViolation,
)
from bhn.models.appointment_model import Appointment
from bhn.models.birth_registration_model import BirthRegistration
from bhn.models.document_model import Document
from bhn.models.health_record_model import HealthRecord, LabResult, Medication
from bhn.models.notification_model import Notification
from bhn.models.provider_model import Doctor, Patient
from bhn.models.system_setting_model import SystemSetting
from bhn.models.user_model import User, UserProfile, UserSession
from bhn.repositories.audit_repo import AuditLogRepository
from bhn.repositories.birth_registration_repo import BirthRegistrationRepository
from bhn.repositories.doctor_repo import DoctorRepository
from bhn.repositories.document_repo import DocumentRepository
from bhn.repositories.facility_repo import FacilityRepository
from bhn.repositories.patient_repo import PatientRepository
from bhn.repositories.session_repo import SessionRepository
from bhn.repositories.system_setting_repo import SystemSettingRepository
from bhn.repositories.user_repo import UserRepository
from bhn.schemas.enums import NotificationType, RecordType


async def count(db: AsyncSession, model, *criteria) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar_one()


@pytest.mark.asyncio
@pytest.mark.unit
class TestCascadeDeletes:
    """Deleting an owner removes the rows that cascade from it."""

    async def test_user_delete_cascades_to_patient_history(
        self,
        db_session: AsyncSession,
        test_user: User,
        patient: Patient,
        health_record: HealthRecord,
        appointment: Appointment,
        make_session,
    ):
        """Test deleting a user removes profile, sessions, patient and clinical rows."""
        db_session.add_all(
            [
                UserProfile(user_id=test_user.id, first_name="Ada", last_name="Byron"),
                Medication(
                    patient_id=patient.id,
                    medication_name="Amoxicillin",
                    dosage="250mg",
                    frequency="3x daily",
                    start_date=date(2024, 3, 1),
                ),
                LabResult(
                    patient_id=patient.id,
                    test_name="CBC",
                    test_date=date(2024, 3, 2),
                    results={"hemoglobin": 13.5},
                ),
                Notification(
                    user_id=test_user.id,
                    notification_type=NotificationType.SYSTEM_ALERT,
                    title="Welcome",
                    message="Your account is ready",
                ),
            ]
        )
        await db_session.commit()
        await make_session(test_user.id)

        user_id, patient_id = test_user.id, patient.id
        await UserRepository(db_session).delete(test_user)

        assert await count(db_session, User, User.id == user_id) == 0
        assert await count(db_session, UserProfile, UserProfile.user_id == user_id) == 0
        assert await count(db_session, UserSession, UserSession.user_id == user_id) == 0
        assert await count(db_session, Notification, Notification.user_id == user_id) == 0
        assert await count(db_session, Patient, Patient.id == patient_id) == 0
        for model in (HealthRecord, Medication, LabResult, Appointment):
            assert await count(db_session, model, model.patient_id == patient_id) == 0

    async def test_doctor_delete_cascades_to_appointments(
        self, db_session: AsyncSession, doctor: Doctor, appointment: Appointment
    ):
        """Test deleting a doctor removes their appointments."""
        doctor_id = doctor.id

        await DoctorRepository(db_session).delete(doctor)

        assert await count(db_session, Appointment, Appointment.doctor_id == doctor_id) == 0

    async def test_delete_by_id_missing_row(self, db_session: AsyncSession):
        """Test deleting an unknown id reports False."""
        assert await PatientRepository(db_session).delete_by_id(uuid.uuid4()) is False


@pytest.mark.asyncio
@pytest.mark.unit
class TestNonCascadingReferences:
    """References without ON DELETE CASCADE block deletion of their target."""

    async def test_primary_doctor_cannot_be_deleted(
        self, db_session: AsyncSession, doctor: Doctor, patient: Patient
    ):
        """Test a doctor still named as primary doctor cannot be deleted."""
        patient.primary_doctor_id = doctor.id
        await db_session.commit()
        doctor_id, patient_id = doctor.id, patient.id

        with pytest.raises(ForeignKeyViolation):
            await DoctorRepository(db_session).delete(doctor)

        assert await count(db_session, Doctor, Doctor.id == doctor_id) == 1
        assert await count(db_session, Patient, Patient.id == patient_id) == 1

    async def test_user_with_audit_entries_cannot_be_deleted(
        self, db_session: AsyncSession, make_user
    ):
        """Test the audit trail keeps its acting user alive."""
        user = await make_user()
        user_id = user.id
        await AuditLogRepository(db_session).append("login", "user", user_id=user_id)

        with pytest.raises(ForeignKeyViolation):
            await UserRepository(db_session).delete(user)

        assert await count(db_session, User, User.id == user_id) == 1

    async def test_document_blocks_patient_delete(
        self, db_session: AsyncSession, patient: Patient, doctor: Doctor
    ):
        """Test a document attached to a patient prevents deleting the patient."""
        await DocumentRepository(db_session).add(
            Document(
                uploaded_by_user_id=doctor.user_id,
                patient_id=patient.id,
                filename="scan.pdf",
                original_filename="scan.pdf",
                file_path="/docs/scan.pdf",
                file_size=1024,
                mime_type="application/pdf",
                document_type="medical_record",
            ),
        )
        patient_id = patient.id

        with pytest.raises(ForeignKeyViolation):
            await PatientRepository(db_session).delete(patient)

        assert await count(db_session, Patient, Patient.id == patient_id) == 1

    async def test_facility_in_use_cannot_be_deleted(
        self, db_session: AsyncSession, facility, health_record: HealthRecord
    ):
        """Test a facility referenced by a health record cannot be deleted."""
        health_record.facility_id = facility.id
        await db_session.commit()

        with pytest.raises(ForeignKeyViolation):
            await FacilityRepository(db_session).delete(facility)

    async def test_unknown_reference_rejected(self, db_session: AsyncSession):
        """Test inserting a row that points at a missing user fails."""
        with pytest.raises(ForeignKeyViolation):
            await PatientRepository(db_session).add(
                Patient(user_id=uuid.uuid4(), bhn_id="BHN-GHOST")
            )


@pytest.mark.asyncio
@pytest.mark.unit
class TestUniqueness:
    """Test unique columns reject duplicates."""

    async def test_duplicate_email(self, db_session: AsyncSession, make_user):
        """Test two users cannot share an email."""
        await make_user(email="dup@x.com")

        with pytest.raises(UniqueViolation) as exc_info:
            await UserRepository(db_session).add(
                User(email="dup@x.com", password_hash="x", user_type="patient")
            )

        assert exc_info.value.table == "users"
        assert exc_info.value.column == "email"
        assert await count(db_session, User, User.email == "dup@x.com") == 1

    async def test_duplicate_bhn_id(
        self, db_session: AsyncSession, patient: Patient, make_user
    ):
        """Test two patients cannot share a BHN ID."""
        other = await make_user()

        with pytest.raises(UniqueViolation) as exc_info:
            await PatientRepository(db_session).add(
                Patient(user_id=other.id, bhn_id="BHN0001")
            )

        assert exc_info.value.column == "bhn_id"

    async def test_duplicate_license_number(
        self, db_session: AsyncSession, doctor: Doctor, make_user
    ):
        """Test two doctors cannot share a license number."""
        other = await make_user(user_type="doctor")

        with pytest.raises(UniqueViolation):
            await DoctorRepository(db_session).add(
                Doctor(user_id=other.id, license_number="LIC-0001", specialization="ENT")
            )

    async def test_duplicate_setting_key(self, db_session: AsyncSession):
        """Test setting keys are unique."""
        await SystemSettingRepository(db_session).add(
            SystemSetting(setting_key="max_login_attempts")
        )

        with pytest.raises(UniqueViolation):
            await SystemSettingRepository(db_session).add(
                SystemSetting(setting_key="max_login_attempts")
            )

    async def test_duplicate_session_token(
        self, db_session: AsyncSession, test_user: User, make_session
    ):
        """Test session tokens are unique."""
        await make_session(test_user.id, session_token="tok-1")

        with pytest.raises(UniqueViolation):
            await SessionRepository(db_session).add(
                UserSession(
                    user_id=test_user.id,
                    session_token="tok-1",
                    expires_at=datetime(2030, 1, 1),
                )
            )


@pytest.mark.asyncio
@pytest.mark.unit
class TestColumnConstraints:
    """Test not-null and check constraints."""

    async def test_missing_required_column(
        self, db_session: AsyncSession, patient: Patient
    ):
        """Test a health record without a title is rejected."""
        with pytest.raises(NotNullViolation) as exc_info:
            await PatientRepository(db_session).add(
                HealthRecord(
                    patient_id=patient.id,
                    record_type=RecordType.VITAL_SIGNS,
                    visit_date=date(2024, 3, 1),
                )
            )

        assert exc_info.value.table == "health_records"
        assert exc_info.value.column == "title"

    @pytest.mark.parametrize("score", [0, 10])
    async def test_apgar_bounds_accepted(
        self, db_session: AsyncSession, birth_registration: BirthRegistration, score
    ):
        """Test Apgar scores at the ends of 0..10 are stored."""
        birth_registration.apgar_score_1min = score
        birth_registration.apgar_score_5min = score
        await db_session.commit()
        await db_session.refresh(birth_registration)

        assert birth_registration.apgar_score_1min == score
        assert birth_registration.apgar_score_5min == score

    @pytest.mark.parametrize("field", ["apgar_score_1min", "apgar_score_5min"])
    @pytest.mark.parametrize("score", [11, -1])
    async def test_apgar_out_of_range_rejected(
        self, db_session: AsyncSession, test_user: User, field, score
    ):
        """Test Apgar scores outside 0..10 are rejected."""
        registration = BirthRegistration(
            bhn_id="BHN-B-0002",
            child_first_name="Grace",
            child_last_name="Hopper",
            birth_date=date(2024, 2, 1),
            mother_first_name="Mary",
            mother_last_name="Murray",
            registered_by_user_id=test_user.id,
            **{field: score},
        )

        with pytest.raises(CheckViolation):
            await BirthRegistrationRepository(db_session).add(registration)
