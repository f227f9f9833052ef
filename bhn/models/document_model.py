import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, String, Text, false, true
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bhn.db.base import Base
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin
from bhn.models.subject import SubjectKind, SubjectReferenceMixin
from bhn.schemas.enums import DocumentType, coerce_enum, document_type_enum

if TYPE_CHECKING:
    from bhn.models.user_model import User


class Document(SubjectReferenceMixin, UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Metadata for an uploaded file.

    The bytes live in object storage; this row keeps only the bucket, key and
    version. A document is about at most one patient, health record or birth
    registration, exposed through ``subject``.
    """

    __tablename__ = "documents"

    __subject_columns__ = {
        SubjectKind.PATIENT: "patient_id",
        SubjectKind.HEALTH_RECORD: "health_record_id",
        SubjectKind.BIRTH_REGISTRATION: "birth_registration_id",
    }

    __table_args__ = (
        Index("idx_documents_patient", "patient_id"),
        Index("idx_documents_type", "document_type"),
        Index("idx_documents_uploaded_by", "uploaded_by_user_id"),
    )

    uploaded_by_user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    patient_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("patients.id")
    )
    health_record_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("health_records.id")
    )
    birth_registration_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("birth_registrations.id")
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    document_type: Mapped[DocumentType] = mapped_column(
        document_type_enum, nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_encrypted: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    encryption_key_id: Mapped[Optional[str]] = mapped_column(String(255))
    s3_bucket: Mapped[Optional[str]] = mapped_column(String(100))
    s3_key: Mapped[Optional[str]] = mapped_column(Text)
    s3_version_id: Mapped[Optional[str]] = mapped_column(String(100))
    is_public: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    access_level: Mapped[Optional[str]] = mapped_column(
        String(50), default="private", server_default="private"
    )

    uploaded_by: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"<Document id={self.id} type={self.document_type} file={self.filename}>"

    @validates("document_type")
    def validate_document_type(self, key, value):
        return coerce_enum(DocumentType, value, field=f"documents.{key}")
