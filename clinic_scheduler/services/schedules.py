import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import sessionmaker

from clinic_scheduler.core.actors import ROLE_DOCTOR, Actor
from clinic_scheduler.core.errors import ForbiddenError, NotFoundError, OverlapConflict
from clinic_scheduler.models.schedule import ScheduleBlock
from clinic_scheduler.repositories.unit_of_work import UnitOfWork
from clinic_scheduler.scheduling.intervals import normalize_day, overlaps, parse_hhmm, validate_window

logger = logging.getLogger(__name__)


class ScheduleService:
    """Doctor weekly-availability management."""

    def __init__(self, session_factory: sessionmaker, clock: Callable[[], datetime] = datetime.now) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _authorize(self, uow: UnitOfWork, actor: Actor, doctor_id: int) -> None:
        if actor.is_admin:
            return
        if actor.role == ROLE_DOCTOR and uow.doctors.find_id_by_user_id(actor.user_id) == doctor_id:
            return
        raise ForbiddenError('Only the doctor or an admin can manage this schedule.')

    def _ensure_no_overlap(
        self,
        uow: UnitOfWork,
        doctor_id: int,
        day_of_week: str,
        start_minutes: int,
        end_minutes: int,
        exclude_schedule_id: int | None = None,
    ) -> None:
        for existing in uow.schedules.find_by_doctor_and_day(doctor_id, day_of_week, active_only=True):
            if existing.id == exclude_schedule_id:
                continue
            if overlaps(start_minutes, end_minutes, parse_hhmm(existing.start_time), parse_hhmm(existing.end_time)):
                raise OverlapConflict(
                    f'Schedule overlaps with existing schedule {existing.start_time}-{existing.end_time} '
                    f'on {day_of_week}.'
                )

    def create_schedule(
        self,
        actor: Actor,
        doctor_id: int,
        day_of_week: str,
        start_time: str,
        end_time: str,
        slot_duration_minutes: int,
        active: bool = True,
    ) -> ScheduleBlock:
        day = normalize_day(day_of_week)
        start_minutes, end_minutes = validate_window(start_time, end_time, slot_duration_minutes)

        with UnitOfWork(self._session_factory) as uow:
            if uow.doctors.lock(doctor_id) is None:
                raise NotFoundError('Doctor not found.')
            self._authorize(uow, actor, doctor_id)

            if active:
                self._ensure_no_overlap(uow, doctor_id, day, start_minutes, end_minutes)

            now = self._clock()
            block = uow.schedules.create(
                ScheduleBlock(
                    doctor_id=doctor_id,
                    day_of_week=day,
                    start_time=start_time,
                    end_time=end_time,
                    slot_duration_minutes=slot_duration_minutes,
                    active=active,
                    created_at=now,
                    updated_at=now,
                )
            )
            uow.commit()

        logger.info('Created schedule %s for doctor %s on %s %s-%s', block.id, doctor_id, day, start_time, end_time)
        return block

    def update_schedule(
        self,
        actor: Actor,
        schedule_id: int,
        day_of_week: str,
        start_time: str,
        end_time: str,
        slot_duration_minutes: int,
        active: bool = True,
    ) -> ScheduleBlock:
        day = normalize_day(day_of_week)
        start_minutes, end_minutes = validate_window(start_time, end_time, slot_duration_minutes)

        with UnitOfWork(self._session_factory) as uow:
            block = uow.schedules.find_by_id(schedule_id)
            if block is None:
                raise NotFoundError('Schedule not found.')
            uow.doctors.lock(block.doctor_id)
            self._authorize(uow, actor, block.doctor_id)

            if active:
                self._ensure_no_overlap(
                    uow, block.doctor_id, day, start_minutes, end_minutes, exclude_schedule_id=block.id
                )

            block.day_of_week = day
            block.start_time = start_time
            block.end_time = end_time
            block.slot_duration_minutes = slot_duration_minutes
            block.active = active
            block.updated_at = self._clock()
            uow.schedules.update(block)
            uow.commit()

        return block

    def delete_schedule(self, actor: Actor, schedule_id: int) -> None:
        with UnitOfWork(self._session_factory) as uow:
            block = uow.schedules.find_by_id(schedule_id)
            if block is None:
                raise NotFoundError('Schedule not found.')
            self._authorize(uow, actor, block.doctor_id)

            uow.schedules.delete(block)
            uow.commit()

        logger.info('Deleted schedule %s', schedule_id)

    def get_doctor_schedules(self, doctor_id: int) -> list[ScheduleBlock]:
        with UnitOfWork(self._session_factory) as uow:
            if uow.doctors.find_by_id(doctor_id) is None:
                raise NotFoundError('Doctor not found.')
            return uow.schedules.find_by_doctor(doctor_id)

    def find_by_doctor_and_day(self, doctor_id: int, day_of_week: str) -> list[ScheduleBlock]:
        with UnitOfWork(self._session_factory) as uow:
            return uow.schedules.find_by_doctor_and_day(doctor_id, normalize_day(day_of_week))
