"""Lookups for the people and services an appointment refers to."""

from sqlalchemy.orm import Session

from clinic_scheduler.models.doctor import Doctor, DoctorService
from clinic_scheduler.models.patient import Patient
from clinic_scheduler.models.service import Service


class DoctorRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, doctor_id: int) -> Doctor | None:
        return self.db.query(Doctor).filter(Doctor.id == doctor_id).first()

    def find_id_by_user_id(self, user_id: int) -> int | None:
        row = self.db.query(Doctor.id).filter(Doctor.user_id == user_id).first()
        return row[0] if row else None

    def lock(self, doctor_id: int) -> Doctor | None:
        """Load the doctor row with a write lock so bookings for one doctor serialise."""
        return self.db.query(Doctor).filter(Doctor.id == doctor_id).with_for_update().first()

    def offers_service(self, doctor_id: int, service_id: int) -> bool:
        return self.db.query(DoctorService.id).filter(
            DoctorService.doctor_id == doctor_id,
            DoctorService.service_id == service_id,
            DoctorService.is_active.is_(True),
        ).first() is not None


class PatientRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, patient_id: int) -> Patient | None:
        return self.db.query(Patient).filter(Patient.id == patient_id).first()

    def find_id_by_user_id(self, user_id: int) -> int | None:
        row = self.db.query(Patient.id).filter(Patient.user_id == user_id).first()
        return row[0] if row else None


class ServiceRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, service_id: int) -> Service | None:
        return self.db.query(Service).filter(Service.id == service_id).first()
