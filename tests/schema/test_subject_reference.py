"""
Subject Reference Tests

Documents and notifications may point at one record at most.
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from bhn.core.exceptions import SubjectConflict
from bhn.models.document_model import Document
from bhn.models.notification_model import Notification
from bhn.models.subject import SubjectKind, SubjectReference
from bhn.repositories.document_repo import DocumentRepository
from bhn.repositories.notification_repo import NotificationRepository
from bhn.schemas.enums import NotificationType


def make_document(uploader_id, **kwargs) -> Document:
    return Document(
        uploaded_by_user_id=uploader_id,
        filename="report.pdf",
        original_filename="Report.pdf",
        file_path="/docs/report.pdf",
        file_size=2048,
        mime_type="application/pdf",
        document_type="lab_result",
        **kwargs,
    )


@pytest.mark.unit
class TestSubjectProperty:
    """Test the subject getter and setter on unsaved rows."""

    def test_no_subject(self):
        assert make_document(uuid.uuid4()).subject is None

    def test_setter_fills_matching_column(self):
        """Test assigning a subject sets its column and clears the others."""
        record_id = uuid.uuid4()
        document = make_document(uuid.uuid4(), patient_id=uuid.uuid4())

        document.subject = SubjectReference(kind=SubjectKind.HEALTH_RECORD, id=record_id)

        assert document.health_record_id == record_id
        assert document.patient_id is None
        assert document.subject == SubjectReference(
            kind=SubjectKind.HEALTH_RECORD, id=record_id
        )

    def test_setter_none_clears(self):
        document = make_document(uuid.uuid4(), patient_id=uuid.uuid4())

        document.subject = None

        assert document.patient_id is None

    def test_unsupported_kind(self):
        """Test a document cannot be about an appointment."""
        document = make_document(uuid.uuid4())

        with pytest.raises(SubjectConflict):
            document.subject = SubjectReference(
                kind=SubjectKind.APPOINTMENT, id=uuid.uuid4()
            )

    def test_getter_rejects_two_subjects(self):
        notification = Notification(
            user_id=uuid.uuid4(),
            notification_type=NotificationType.TEST_RESULT,
            title="Results",
            message="Ready",
            related_appointment_id=uuid.uuid4(),
            related_health_record_id=uuid.uuid4(),
        )

        with pytest.raises(SubjectConflict):
            notification.subject

    def test_reference_is_frozen(self):
        reference = SubjectReference(kind=SubjectKind.PATIENT, id=uuid.uuid4())

        with pytest.raises(Exception):
            reference.id = uuid.uuid4()


@pytest.mark.asyncio
@pytest.mark.unit
class TestSubjectOnWrite:
    """Test the single-subject rule is checked when rows are flushed."""

    async def test_two_subjects_rejected_on_insert(
        self, db_session: AsyncSession, patient, health_record, doctor
    ):
        document = make_document(
            doctor.user_id, patient_id=patient.id, health_record_id=health_record.id
        )

        with pytest.raises(SubjectConflict):
            await DocumentRepository(db_session).add(document)

    async def test_second_subject_rejected_on_update(
        self, db_session: AsyncSession, test_user, appointment, health_record
    ):
        repo = NotificationRepository(db_session)
        notification = await repo.add(
            Notification(
                user_id=test_user.id,
                notification_type=NotificationType.APPOINTMENT_REMINDER,
                title="Reminder",
                message="See you tomorrow",
                related_appointment_id=appointment.id,
            )
        )

        notification.related_health_record_id = health_record.id
        with pytest.raises(SubjectConflict):
            await repo.update(notification)

    async def test_list_for_subject(
        self, db_session: AsyncSession, patient, health_record, doctor
    ):
        """Test documents are found by the record they refer to."""
        repo = DocumentRepository(db_session)
        await repo.add(make_document(doctor.user_id, patient_id=patient.id))
        await repo.add(make_document(doctor.user_id, health_record_id=health_record.id))

        found = await repo.list_for_subject(
            SubjectReference(kind=SubjectKind.PATIENT, id=patient.id)
        )

        assert len(found) == 1
        assert found[0].patient_id == patient.id

    async def test_list_for_unsupported_subject(self, db_session: AsyncSession):
        with pytest.raises(SubjectConflict):
            await DocumentRepository(db_session).list_for_subject(
                SubjectReference(kind=SubjectKind.APPOINTMENT, id=uuid.uuid4())
            )
