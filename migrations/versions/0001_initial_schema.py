"""Initial Birth Health Network schema

Revision ID: 0001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from bhn.core.seed import DEFAULT_SYSTEM_SETTINGS
from bhn.db.ddl import (
    EXTENSIONS,
    drop_function_statements,
    drop_search_index_statements,
    drop_trigger_statements,
    extension_statements,
    predicate_function_statements,
    row_level_security_statements,
    search_index_statements,
    trigger_statements,
    warn_rls_without_policies,
)
from bhn.schemas.enums import (
    AppointmentStatus,
    BirthStatus,
    BloodType,
    DocumentType,
    Gender,
    NotificationType,
    RecordType,
    SessionStatus,
    UrgencyLevel,
    UserStatus,
    UserType,
)

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


ENUM_TYPES = {
    'user_type': UserType,
    'user_status': UserStatus,
    'gender': Gender,
    'blood_type': BloodType,
    'appointment_status': AppointmentStatus,
    'record_type': RecordType,
    'urgency_level': UrgencyLevel,
    'document_type': DocumentType,
    'notification_type': NotificationType,
    'birth_status': BirthStatus,
    'session_status': SessionStatus,
}


def enum_type(name):
    # Types are created up front; columns only reference them
    labels = [member.value for member in ENUM_TYPES[name]]
    return postgresql.ENUM(*labels, name=name, create_type=False)


def uuid_pk():
    return sa.Column(
        'id',
        postgresql.UUID(as_uuid=True),
        server_default=sa.text('uuid_generate_v4()'),
        nullable=False,
    )


def uuid_fk(name, target, nullable=True, ondelete=None):
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def created_at():
    return sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True)


def updated_at():
    return sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True)


def upgrade() -> None:
    for statement in extension_statements():
        op.execute(statement)

    bind = op.get_bind()
    for name, labels in ENUM_TYPES.items():
        postgresql.ENUM(*[m.value for m in labels], name=name).create(bind, checkfirst=True)

    # ==================== CORE USER TABLES ====================
    op.create_table('users',
        uuid_pk(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('user_type', enum_type('user_type'), nullable=False),
        sa.Column('status', enum_type('user_status'), server_default='pending_verification', nullable=True),
        sa.Column('email_verified', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('email_verification_token', sa.String(255), nullable=True),
        sa.Column('password_reset_token', sa.String(255), nullable=True),
        sa.Column('password_reset_expires', sa.TIMESTAMP(), nullable=True),
        sa.Column('last_login', sa.TIMESTAMP(), nullable=True),
        sa.Column('login_attempts', sa.Integer(), server_default='0', nullable=True),
        sa.Column('locked_until', sa.TIMESTAMP(), nullable=True),
        sa.Column('two_factor_enabled', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('two_factor_secret', sa.String(255), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table('user_profiles',
        uuid_pk(),
        uuid_fk('user_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('middle_name', sa.String(100), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', enum_type('gender'), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('country', sa.String(100), server_default='Canada', nullable=True),
        sa.Column('emergency_contact_name', sa.String(200), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(20), nullable=True),
        sa.Column('emergency_contact_relationship', sa.String(100), nullable=True),
        sa.Column('profile_image_url', sa.Text(), nullable=True),
        sa.Column('timezone', sa.String(50), server_default='America/Toronto', nullable=True),
        sa.Column('language_preference', sa.String(10), server_default='en', nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('doctors',
        uuid_pk(),
        uuid_fk('user_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('license_number', sa.String(50), nullable=False),
        sa.Column('specialization', sa.String(200), nullable=False),
        sa.Column('sub_specialties', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('years_of_experience', sa.Integer(), nullable=True),
        sa.Column('education', sa.Text(), nullable=True),
        sa.Column('certifications', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('hospital_affiliations', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('office_hours', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('accepting_new_patients', sa.Boolean(), server_default=sa.true(), nullable=True),
        sa.Column('consultation_fee', sa.Numeric(10, 2), nullable=True),
        sa.Column('languages_spoken', postgresql.ARRAY(sa.Text()), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('license_number'),
    )

    op.create_table('patients',
        uuid_pk(),
        uuid_fk('user_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('bhn_id', sa.String(20), nullable=False),
        sa.Column('blood_type', enum_type('blood_type'), server_default='unknown', nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('current_medications', sa.Text(), nullable=True),
        sa.Column('medical_conditions', sa.Text(), nullable=True),
        sa.Column('insurance_provider', sa.String(200), nullable=True),
        sa.Column('insurance_number', sa.String(100), nullable=True),
        sa.Column('insurance_group_number', sa.String(100), nullable=True),
        uuid_fk('primary_doctor_id', 'doctors.id'),
        sa.Column('preferred_pharmacy', sa.Text(), nullable=True),
        sa.Column('medical_history', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('family_history', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('bhn_id'),
    )

    op.create_table('healthcare_facilities',
        uuid_pk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('facility_type', sa.String(100), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(50), nullable=False),
        sa.Column('zip_code', sa.String(20), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('website', sa.Text(), nullable=True),
        sa.Column('emergency_services', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('services_offered', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('operating_hours', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    # ==================== BIRTH REGISTRATION ====================
    op.create_table('birth_registrations',
        uuid_pk(),
        sa.Column('bhn_id', sa.String(20), nullable=False),
        sa.Column('child_first_name', sa.String(100), nullable=False),
        sa.Column('child_last_name', sa.String(100), nullable=False),
        sa.Column('child_middle_name', sa.String(100), nullable=True),
        sa.Column('child_gender', enum_type('gender'), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=False),
        sa.Column('birth_time', sa.Time(), nullable=True),
        sa.Column('birth_weight', sa.Numeric(5, 2), nullable=True),
        sa.Column('birth_length', sa.Numeric(5, 2), nullable=True),
        sa.Column('birth_location', sa.String(255), nullable=True),
        uuid_fk('birth_hospital_id', 'healthcare_facilities.id'),
        sa.Column('mother_first_name', sa.String(100), nullable=False),
        sa.Column('mother_last_name', sa.String(100), nullable=False),
        sa.Column('mother_maiden_name', sa.String(100), nullable=True),
        sa.Column('mother_date_of_birth', sa.Date(), nullable=True),
        sa.Column('mother_place_of_birth', sa.String(255), nullable=True),
        sa.Column('mother_occupation', sa.String(100), nullable=True),
        sa.Column('mother_address', sa.Text(), nullable=True),
        sa.Column('father_first_name', sa.String(100), nullable=True),
        sa.Column('father_last_name', sa.String(100), nullable=True),
        sa.Column('father_date_of_birth', sa.Date(), nullable=True),
        sa.Column('father_place_of_birth', sa.String(255), nullable=True),
        sa.Column('father_occupation', sa.String(100), nullable=True),
        sa.Column('father_address', sa.Text(), nullable=True),
        sa.Column('registration_status', enum_type('birth_status'), server_default='pending', nullable=True),
        uuid_fk('registered_by_user_id', 'users.id', nullable=False),
        uuid_fk('reviewed_by_user_id', 'users.id'),
        sa.Column('approval_date', sa.TIMESTAMP(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('registration_number', sa.String(50), nullable=True),
        sa.Column('delivery_type', sa.String(100), nullable=True),
        sa.Column('complications', sa.Text(), nullable=True),
        sa.Column('apgar_score_1min', sa.Integer(), nullable=True),
        sa.Column('apgar_score_5min', sa.Integer(), nullable=True),
        uuid_fk('attending_physician_id', 'doctors.id'),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('bhn_id'),
        sa.CheckConstraint('apgar_score_1min BETWEEN 0 AND 10', name='birth_registrations_apgar_score_1min_check'),
        sa.CheckConstraint('apgar_score_5min BETWEEN 0 AND 10', name='birth_registrations_apgar_score_5min_check'),
    )

    # ==================== HEALTH RECORDS ====================
    op.create_table('health_records',
        uuid_pk(),
        uuid_fk('patient_id', 'patients.id', nullable=False, ondelete='CASCADE'),
        uuid_fk('doctor_id', 'doctors.id'),
        uuid_fk('facility_id', 'healthcare_facilities.id'),
        sa.Column('record_type', enum_type('record_type'), nullable=False),
        sa.Column('urgency_level', enum_type('urgency_level'), server_default='normal', nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('diagnosis', sa.Text(), nullable=True),
        sa.Column('treatment_plan', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('vital_signs', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('visit_date', sa.Date(), nullable=False),
        sa.Column('visit_time', sa.Time(), nullable=True),
        sa.Column('follow_up_date', sa.Date(), nullable=True),
        sa.Column('follow_up_instructions', sa.Text(), nullable=True),
        sa.Column('record_status', sa.String(50), server_default='active', nullable=True),
        sa.Column('is_confidential', sa.Boolean(), server_default=sa.false(), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('medications',
        uuid_pk(),
        uuid_fk('patient_id', 'patients.id', nullable=False, ondelete='CASCADE'),
        uuid_fk('prescribed_by_doctor_id', 'doctors.id'),
        uuid_fk('health_record_id', 'health_records.id'),
        sa.Column('medication_name', sa.String(255), nullable=False),
        sa.Column('dosage', sa.String(100), nullable=False),
        sa.Column('frequency', sa.String(100), nullable=False),
        sa.Column('duration', sa.String(100), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('side_effects', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('lab_results',
        uuid_pk(),
        uuid_fk('patient_id', 'patients.id', nullable=False, ondelete='CASCADE'),
        uuid_fk('health_record_id', 'health_records.id'),
        uuid_fk('ordered_by_doctor_id', 'doctors.id'),
        sa.Column('test_name', sa.String(255), nullable=False),
        sa.Column('test_type', sa.String(100), nullable=True),
        sa.Column('test_date', sa.Date(), nullable=False),
        sa.Column('results', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('reference_ranges', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('status', sa.String(50), server_default='completed', nullable=True),
        sa.Column('lab_facility', sa.String(255), nullable=True),
        sa.Column('technician_notes', sa.Text(), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    # ==================== APPOINTMENTS ====================
    op.create_table('appointments',
        uuid_pk(),
        uuid_fk('patient_id', 'patients.id', nullable=False, ondelete='CASCADE'),
        uuid_fk('doctor_id', 'doctors.id', nullable=False, ondelete='CASCADE'),
        uuid_fk('facility_id', 'healthcare_facilities.id'),
        sa.Column('appointment_date', sa.Date(), nullable=False),
        sa.Column('appointment_time', sa.Time(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), server_default='30', nullable=True),
        sa.Column('appointment_type', sa.String(100), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', enum_type('appointment_status'), server_default='scheduled', nullable=True),
        sa.Column('chief_complaint', sa.Text(), nullable=True),
        sa.Column('visit_notes', sa.Text(), nullable=True),
        sa.Column('prescription_notes', sa.Text(), nullable=True),
        sa.Column('next_appointment_recommended', sa.Boolean(), server_default=sa.false(), nullable=True),
        uuid_fk('scheduled_by_user_id', 'users.id'),
        sa.Column('confirmed_at', sa.TIMESTAMP(), nullable=True),
        sa.Column('cancelled_at', sa.TIMESTAMP(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('fee_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('payment_status', sa.String(50), server_default='pending', nullable=True),
        sa.Column('insurance_claim_number', sa.String(100), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    # ==================== DOCUMENTS ====================
    op.create_table('documents',
        uuid_pk(),
        uuid_fk('uploaded_by_user_id', 'users.id', nullable=False),
        uuid_fk('patient_id', 'patients.id'),
        uuid_fk('health_record_id', 'health_records.id'),
        uuid_fk('birth_registration_id', 'birth_registrations.id'),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('original_filename', sa.String(255), nullable=False),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('document_type', enum_type('document_type'), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_encrypted', sa.Boolean(), server_default=sa.true(), nullable=True),
        sa.Column('encryption_key_id', sa.String(255), nullable=True),
        sa.Column('s3_bucket', sa.String(100), nullable=True),
        sa.Column('s3_key', sa.Text(), nullable=True),
        sa.Column('s3_version_id', sa.String(100), nullable=True),
        sa.Column('is_public', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('access_level', sa.String(50), server_default='private', nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table('notifications',
        uuid_pk(),
        uuid_fk('user_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('notification_type', enum_type('notification_type'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('action_url', sa.Text(), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('read_at', sa.TIMESTAMP(), nullable=True),
        uuid_fk('related_appointment_id', 'appointments.id'),
        uuid_fk('related_health_record_id', 'health_records.id'),
        uuid_fk('related_birth_registration_id', 'birth_registrations.id'),
        sa.Column('email_sent', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('sms_sent', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('push_sent', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.Column('expires_at', sa.TIMESTAMP(), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    # ==================== SECURITY & AUDIT ====================
    op.create_table('audit_logs',
        uuid_pk(),
        uuid_fk('user_id', 'users.id'),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(100), nullable=False),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('old_values', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('new_values', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ip_address', postgresql.INET(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('success', sa.Boolean(), server_default=sa.true(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        created_at(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('user_sessions',
        uuid_pk(),
        uuid_fk('user_id', 'users.id', nullable=False, ondelete='CASCADE'),
        sa.Column('session_token', sa.String(255), nullable=False),
        sa.Column('refresh_token', sa.String(255), nullable=True),
        sa.Column('device_info', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ip_address', postgresql.INET(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('status', enum_type('session_status'), server_default='active', nullable=True),
        sa.Column('expires_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('last_activity', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_token'),
        sa.UniqueConstraint('refresh_token'),
    )

    # ==================== SYSTEM CONFIGURATION ====================
    system_settings = op.create_table('system_settings',
        uuid_pk(),
        sa.Column('setting_key', sa.String(100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=True),
        sa.Column('setting_type', sa.String(50), server_default='string', nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_public', sa.Boolean(), server_default=sa.false(), nullable=True),
        created_at(),
        updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('setting_key'),
    )

    # ==================== INDEXES ====================
    op.create_index('idx_users_email', 'users', ['email'])
    op.create_index('idx_users_status', 'users', ['status'])
    op.create_index('idx_users_type', 'users', ['user_type'])
    op.create_index('idx_user_profiles_user_id', 'user_profiles', ['user_id'])
    op.create_index('idx_user_profiles_name', 'user_profiles', ['first_name', 'last_name'])

    op.create_index('idx_patients_user_id', 'patients', ['user_id'])
    op.create_index('idx_patients_bhn_id', 'patients', ['bhn_id'])
    op.create_index('idx_patients_primary_doctor', 'patients', ['primary_doctor_id'])

    op.create_index('idx_doctors_user_id', 'doctors', ['user_id'])
    op.create_index('idx_doctors_license', 'doctors', ['license_number'])
    op.create_index('idx_doctors_specialization', 'doctors', ['specialization'])

    op.create_index('idx_birth_registrations_bhn_id', 'birth_registrations', ['bhn_id'])
    op.create_index('idx_birth_registrations_status', 'birth_registrations', ['registration_status'])
    op.create_index('idx_birth_registrations_date', 'birth_registrations', ['birth_date'])
    op.create_index('idx_birth_registrations_hospital', 'birth_registrations', ['birth_hospital_id'])

    op.create_index('idx_health_records_patient', 'health_records', ['patient_id'])
    op.create_index('idx_health_records_doctor', 'health_records', ['doctor_id'])
    op.create_index('idx_health_records_date', 'health_records', ['visit_date'])
    op.create_index('idx_health_records_type', 'health_records', ['record_type'])
    op.create_index('idx_health_records_urgency', 'health_records', ['urgency_level'])

    op.create_index('idx_appointments_patient', 'appointments', ['patient_id'])
    op.create_index('idx_appointments_doctor', 'appointments', ['doctor_id'])
    op.create_index('idx_appointments_date', 'appointments', ['appointment_date'])
    op.create_index('idx_appointments_status', 'appointments', ['status'])
    op.create_index('idx_appointments_datetime', 'appointments', ['appointment_date', 'appointment_time'])

    op.create_index('idx_documents_patient', 'documents', ['patient_id'])
    op.create_index('idx_documents_type', 'documents', ['document_type'])
    op.create_index('idx_documents_uploaded_by', 'documents', ['uploaded_by_user_id'])

    op.create_index('idx_notifications_user', 'notifications', ['user_id'])
    op.create_index('idx_notifications_type', 'notifications', ['notification_type'])
    op.create_index(
        'idx_notifications_unread', 'notifications', ['user_id', 'is_read'],
        postgresql_where=sa.text('is_read = FALSE'),
    )

    op.create_index('idx_audit_logs_user', 'audit_logs', ['user_id'])
    op.create_index('idx_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('idx_audit_logs_resource', 'audit_logs', ['resource_type', 'resource_id'])
    op.create_index('idx_audit_logs_timestamp', 'audit_logs', ['created_at'])

    op.create_index('idx_user_sessions_user', 'user_sessions', ['user_id'])
    op.create_index('idx_user_sessions_token', 'user_sessions', ['session_token'])
    op.create_index('idx_user_sessions_status', 'user_sessions', ['status'])

    for statement in search_index_statements():
        op.execute(statement)

    # ==================== TRIGGERS, RLS, HELPER FUNCTIONS ====================
    for statement in trigger_statements():
        op.execute(statement)

    for statement in row_level_security_statements():
        op.execute(statement)
    warn_rls_without_policies()

    for statement in predicate_function_statements():
        op.execute(statement)

    # ==================== INITIAL DATA ====================
    op.bulk_insert(system_settings, DEFAULT_SYSTEM_SETTINGS)


def downgrade() -> None:
    for statement in drop_trigger_statements():
        op.execute(statement)

    for statement in drop_search_index_statements():
        op.execute(statement)

    for table in (
        'system_settings',
        'user_sessions',
        'audit_logs',
        'notifications',
        'documents',
        'appointments',
        'lab_results',
        'medications',
        'health_records',
        'birth_registrations',
        'healthcare_facilities',
        'patients',
        'doctors',
        'user_profiles',
        'users',
    ):
        op.drop_table(table)

    for statement in drop_function_statements():
        op.execute(statement)

    bind = op.get_bind()
    for name in reversed(list(ENUM_TYPES)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)

    for name in reversed(EXTENSIONS):
        op.execute(f'DROP EXTENSION IF EXISTS "{name}"')
