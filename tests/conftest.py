from datetime import datetime
from threading import Lock
from types import SimpleNamespace

import pytest

from clinic_scheduler.core.actors import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT, Actor
from clinic_scheduler.core.config import Settings
from clinic_scheduler.database import create_database_engine, create_session_factory, init_schema
from clinic_scheduler.models.doctor import Doctor, DoctorService
from clinic_scheduler.models.patient import Patient
from clinic_scheduler.models.service import Service
from clinic_scheduler.models.user import User

# Monday morning; every test works relative to this instant.
NOW = datetime(2026, 3, 2, 8, 0)


class FrozenClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent = []
        self._lock = Lock()

    def _record(self, event, recipient, notice) -> None:
        if self.fail:
            raise RuntimeError('mail server unavailable')
        with self._lock:
            self.sent.append((event, recipient, notice))

    def send_appointment_created(self, recipient, notice) -> None:
        self._record('created', recipient, notice)

    def send_appointment_confirmed(self, recipient, notice) -> None:
        self._record('confirmed', recipient, notice)

    def send_appointment_cancelled(self, recipient, notice) -> None:
        self._record('cancelled', recipient, notice)

    def send_appointment_completed(self, recipient, notice) -> None:
        self._record('completed', recipient, notice)

    def send_appointment_reminder(self, recipient, notice) -> None:
        self._record('reminder', recipient, notice)


def seed_clinic(session_factory) -> SimpleNamespace:
    db = session_factory()
    try:
        admin_user = User(email='admin@clinic.test', first_name='Ada', last_name='Admin', role=ROLE_ADMIN)
        doctor_user = User(email='house@clinic.test', first_name='Greg', last_name='House', role=ROLE_DOCTOR)
        other_doctor_user = User(email='wilson@clinic.test', first_name='James', last_name='Wilson', role=ROLE_DOCTOR)
        patient_user = User(email='pat@example.test', first_name='Pat', last_name='Lee', role=ROLE_PATIENT)
        other_patient_user = User(email='sam@example.test', first_name='Sam', last_name='Roe', role=ROLE_PATIENT)
        db.add_all([admin_user, doctor_user, other_doctor_user, patient_user, other_patient_user])
        db.flush()

        doctor = Doctor(user_id=doctor_user.id, specialty='diagnostics', is_active=True)
        other_doctor = Doctor(user_id=other_doctor_user.id, specialty='oncology', is_active=True)
        patient = Patient(user_id=patient_user.id, is_active=True)
        other_patient = Patient(user_id=other_patient_user.id, is_active=True)
        consultation = Service(name='Consultation', duration_minutes=30, price=50, is_active=True)
        long_exam = Service(name='Extended exam', duration_minutes=60, price=90, is_active=True)
        retired = Service(name='Retired service', duration_minutes=30, price=10, is_active=False)
        db.add_all([doctor, other_doctor, patient, other_patient, consultation, long_exam, retired])
        db.flush()

        db.add_all([
            DoctorService(doctor_id=doctor.id, service_id=consultation.id, is_active=True),
            DoctorService(doctor_id=doctor.id, service_id=long_exam.id, is_active=True),
            DoctorService(doctor_id=doctor.id, service_id=retired.id, is_active=True),
        ])
        db.commit()

        return SimpleNamespace(
            admin=Actor(user_id=admin_user.id, role=ROLE_ADMIN),
            doctor=Actor(user_id=doctor_user.id, role=ROLE_DOCTOR),
            other_doctor=Actor(user_id=other_doctor_user.id, role=ROLE_DOCTOR),
            patient=Actor(user_id=patient_user.id, role=ROLE_PATIENT),
            other_patient=Actor(user_id=other_patient_user.id, role=ROLE_PATIENT),
            doctor_id=doctor.id,
            other_doctor_id=other_doctor.id,
            patient_id=patient.id,
            other_patient_id=other_patient.id,
            consultation_id=consultation.id,
            long_exam_id=long_exam.id,
            retired_service_id=retired.id,
            patient_email=patient_user.email,
            doctor_email=doctor_user.email,
        )
    finally:
        db.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url='sqlite:///:memory:', reminders_enabled=False)


@pytest.fixture
def engine(settings):
    engine = create_database_engine(settings.database_url)
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def clinic(session_factory) -> SimpleNamespace:
    return seed_clinic(session_factory)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_database_engine(f'sqlite:///{tmp_path / "clinic.db"}')
    init_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def file_clinic(file_session_factory) -> SimpleNamespace:
    return seed_clinic(file_session_factory)
