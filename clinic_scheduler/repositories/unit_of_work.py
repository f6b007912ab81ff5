from sqlalchemy.orm import Session, sessionmaker

from clinic_scheduler.repositories.appointments import AppointmentRepository
from clinic_scheduler.repositories.directory import (
    DoctorRepository,
    PatientRepository,
    ServiceRepository,
)
from clinic_scheduler.repositories.schedules import ScheduleRepository


class UnitOfWork:
    """One transaction scope over every repository the core needs.

    Nothing is committed unless ``commit()`` is called; leaving the block with
    an exception, or without committing, rolls the transaction back.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> 'UnitOfWork':
        self.session = self._session_factory()
        self.appointments = AppointmentRepository(self.session)
        self.schedules = ScheduleRepository(self.session)
        self.doctors = DoctorRepository(self.session)
        self.patients = PatientRepository(self.session)
        self.services = ServiceRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        try:
            # Detach first so loaded rows stay readable after the scope closes.
            self.session.expunge_all()
            self.session.rollback()
        finally:
            self.session.close()
            self.session = None

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
