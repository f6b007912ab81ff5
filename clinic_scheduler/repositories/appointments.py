from datetime import date, datetime, timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.scheduling.intervals import day_bounds

# Appointments starting this long before a range can still run into it.
CONFLICT_LOOKBACK = timedelta(days=1)


class AppointmentRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def update(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def find_by_id(self, appointment_id: int) -> Appointment | None:
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def find_by_doctor_and_date(self, doctor_id: int, target_date: date) -> list[Appointment]:
        start_of_day, end_of_day = day_bounds(target_date)
        return self.find_by_doctor_and_date_range(doctor_id, start_of_day, end_of_day)

    def find_by_doctor_and_date_range(self, doctor_id: int, start: datetime, end: datetime) -> list[Appointment]:
        """Appointments of any status whose interval reaches into [start, end)."""
        candidates = self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.scheduled_at >= start - CONFLICT_LOOKBACK,
            Appointment.scheduled_at < end,
        ).order_by(Appointment.scheduled_at.asc(), Appointment.id.asc()).all()

        return [appointment for appointment in candidates if appointment.ends_at > start]

    def find_by_scheduled_at_range(self, start: datetime, end: datetime, status: str) -> list[Appointment]:
        """Appointments in ``status`` whose start falls inside [start, end], inclusive."""
        return self.db.query(Appointment).filter(
            Appointment.status == status,
            Appointment.scheduled_at >= start,
            Appointment.scheduled_at <= end,
        ).order_by(Appointment.scheduled_at.asc()).all()

    def list_for_patient(self, patient_id: int) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.patient_id == patient_id,
        ).order_by(Appointment.scheduled_at.asc()).all()

    def list_for_doctor(self, doctor_id: int) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
        ).order_by(Appointment.scheduled_at.asc()).all()

    def list_all(self) -> list[Appointment]:
        return self.db.query(Appointment).order_by(Appointment.scheduled_at.asc()).all()

    def mark_reminder_24h_sent(self, appointment_id: int) -> None:
        self.db.execute(
            update(Appointment).where(Appointment.id == appointment_id).values(reminder_24h_sent=True)
        )

    def mark_reminder_1h_sent(self, appointment_id: int) -> None:
        self.db.execute(
            update(Appointment).where(Appointment.id == appointment_id).values(reminder_1h_sent=True)
        )
