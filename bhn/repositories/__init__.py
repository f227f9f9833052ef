from .appointment_repo import AppointmentRepository
from .audit_repo import AuditLogRepository
from .birth_registration_repo import BirthRegistrationRepository
from .doctor_repo import DoctorRepository
from .document_repo import DocumentRepository
from .facility_repo import FacilityRepository
from .notification_repo import NotificationRepository
from .patient_repo import PatientRepository
from .session_repo import SessionRepository
from .system_setting_repo import SystemSettingRepository
from .user_repo import UserRepository
