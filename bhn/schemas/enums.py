from enum import Enum
from typing import Optional, Type, TypeVar

from sqlalchemy.dialects.postgresql import ENUM as PGENUM

from bhn.core.exceptions import EnumViolation
from bhn.db.base import Base


E = TypeVar("E", bound=Enum)


class UserType(str, Enum):
    """User role tag"""

    PATIENT = "patient"
    DOCTOR = "doctor"
    NURSE = "nurse"
    ADMIN = "admin"
    HOSPITAL_STAFF = "hospital_staff"
    PROVIDER = "provider"


class UserStatus(str, Enum):
    """User account lifecycle"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING_VERIFICATION = "pending_verification"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class BloodType(str, Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"
    UNKNOWN = "unknown"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle"""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class RecordType(str, Enum):
    """Health record category"""

    VITAL_SIGNS = "vital_signs"
    LAB_RESULTS = "lab_results"
    VACCINATION = "vaccination"
    PRENATAL = "prenatal"
    CONSULTATION = "consultation"
    MENTAL_HEALTH = "mental_health"
    PHYSICAL_THERAPY = "physical_therapy"
    NUTRITION = "nutrition"
    BIRTH_RECORD = "birth_record"
    EMERGENCY = "emergency"


class UrgencyLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
    CRITICAL = "critical"


class DocumentType(str, Enum):
    BIRTH_CERTIFICATE = "birth_certificate"
    MEDICAL_RECORD = "medical_record"
    LAB_RESULT = "lab_result"
    PRESCRIPTION = "prescription"
    INSURANCE_CARD = "insurance_card"
    ID_DOCUMENT = "id_document"
    CONSENT_FORM = "consent_form"
    IMAGE = "image"
    OTHER = "other"


class NotificationType(str, Enum):
    APPOINTMENT_REMINDER = "appointment_reminder"
    TEST_RESULT = "test_result"
    PRESCRIPTION_REFILL = "prescription_refill"
    SYSTEM_ALERT = "system_alert"
    BIRTH_REGISTRATION = "birth_registration"
    DOCUMENT_UPLOAD = "document_upload"


class BirthStatus(str, Enum):
    """Birth registration review lifecycle"""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_REVIEW = "requires_review"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


def _enum_values(enum_cls: Type[Enum]) -> list:
    return [member.value for member in enum_cls]


def _pg_enum(enum_cls: Type[Enum], name: str) -> PGENUM:
    # Labels are stored by value ("A+"), never by member name ("A_POSITIVE")
    return PGENUM(
        enum_cls,
        name=name,
        values_callable=_enum_values,
        validate_strings=True,
        create_constraint=True,
        metadata=Base.metadata,
    )


# ============= PostgreSQL ENUM Types (Reusable) =============
user_type_enum = _pg_enum(UserType, "user_type")
user_status_enum = _pg_enum(UserStatus, "user_status")
gender_enum = _pg_enum(Gender, "gender")
blood_type_enum = _pg_enum(BloodType, "blood_type")
appointment_status_enum = _pg_enum(AppointmentStatus, "appointment_status")
record_type_enum = _pg_enum(RecordType, "record_type")
urgency_level_enum = _pg_enum(UrgencyLevel, "urgency_level")
document_type_enum = _pg_enum(DocumentType, "document_type")
notification_type_enum = _pg_enum(NotificationType, "notification_type")
birth_status_enum = _pg_enum(BirthStatus, "birth_status")
session_status_enum = _pg_enum(SessionStatus, "session_status")

ALL_ENUM_TYPES = (
    user_type_enum,
    user_status_enum,
    gender_enum,
    blood_type_enum,
    appointment_status_enum,
    record_type_enum,
    urgency_level_enum,
    document_type_enum,
    notification_type_enum,
    birth_status_enum,
    session_status_enum,
)


def coerce_enum(enum_cls: Type[E], value: object, field: str) -> Optional[E]:
    """
    Coerce a raw label to its enum member.

    Args:
        enum_cls: Closed enum domain for the column
        value: Member, label string or None
        field: ``table.column`` used in the error message

    Returns:
        The enum member, or None when value is None

    Raises:
        EnumViolation: If value is not one of the domain's labels
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise EnumViolation.for_field(field, value, _enum_values(enum_cls)) from None
