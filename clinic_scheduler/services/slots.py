from datetime import date

from sqlalchemy.orm import sessionmaker

from clinic_scheduler.core.errors import InactiveError, InvalidInputError, NotFoundError
from clinic_scheduler.repositories.unit_of_work import UnitOfWork
from clinic_scheduler.scheduling.availability import resolve_availability
from clinic_scheduler.scheduling.intervals import day_of_week_for
from clinic_scheduler.scheduling.slots import TimeSlot, generate_slots


class SlotService:
    """Read-side availability: a point-in-time snapshot, never cached."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get_available_slots(self, doctor_id: int, service_id: int, target_date: date) -> list[TimeSlot]:
        with UnitOfWork(self._session_factory) as uow:
            doctor = uow.doctors.find_by_id(doctor_id)
            if doctor is None:
                raise NotFoundError('Doctor not found.')
            if not doctor.is_active:
                raise InactiveError('Doctor is not active.')

            service = uow.services.find_by_id(service_id)
            if service is None:
                raise NotFoundError('Service not found.')
            if not service.is_active:
                raise InactiveError('Service is not active.')
            if not uow.doctors.offers_service(doctor_id, service_id):
                raise InvalidInputError('Doctor does not offer this service.')

            blocks = uow.schedules.find_by_doctor_and_day(doctor_id, day_of_week_for(target_date), active_only=True)
            if not blocks:
                return []

            appointments = uow.appointments.find_by_doctor_and_date(doctor_id, target_date)

        candidates = generate_slots(blocks, service.duration_minutes)
        return resolve_availability(candidates, appointments, target_date, service.duration_minutes)
