from .user_model import (
    User,
    UserProfile,
    UserSession
)
from .provider_model import (
    Doctor,
    Patient
)
from .facility_model import HealthcareFacility
from .birth_registration_model import BirthRegistration
from .health_record_model import (
    HealthRecord,
    Medication,
    LabResult
)
from .appointment_model import Appointment
from .document_model import Document
from .notification_model import Notification
from .audit_model import AuditLog
from .system_setting_model import SystemSetting
from .subject import SubjectKind, SubjectReference

# Write-path hooks and PostgreSQL-only DDL attach to the classes above
from bhn.db import ddl, hooks  # noqa: E402,F401
