"""
Appointment lifecycle.

pending -> confirmed -> completed, and pending|confirmed -> cancelled.
cancelled and completed are terminal. Every write re-checks conflicts inside
its own transaction with the doctor row locked, so a slot shown as free
earlier cannot be double-booked.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.orm import sessionmaker

from clinic_scheduler.core.actors import ROLE_DOCTOR, ROLE_PATIENT, Actor
from clinic_scheduler.core.config import Settings
from clinic_scheduler.core.errors import (
    AlreadyCancelled,
    AlreadyCompleted,
    ForbiddenError,
    InactiveError,
    InvalidInputError,
    InvalidStateTransition,
    NotFoundError,
    PastSchedule,
    SlotUnavailable,
    TooLateToCancel,
)
from clinic_scheduler.models.appointment import (
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Appointment,
)
from clinic_scheduler.notifications.dispatcher import NotificationDispatcher
from clinic_scheduler.notifications.notices import build_notice
from clinic_scheduler.notifications.port import EVENT_CANCELLED, EVENT_COMPLETED, EVENT_CONFIRMED, EVENT_CREATED
from clinic_scheduler.repositories.unit_of_work import UnitOfWork
from clinic_scheduler.scheduling.availability import find_conflict

logger = logging.getLogger(__name__)


def _ensure_not_terminal(appointment: Appointment) -> None:
    if appointment.status == STATUS_CANCELLED:
        raise AlreadyCancelled()
    if appointment.status == STATUS_COMPLETED:
        raise AlreadyCompleted()


def _to_clinic_time(value: datetime) -> datetime:
    """Convert an offset-carrying instant to clinic-local wall time, minute precision."""
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)


def _require_text(value: str | None, message: str) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise InvalidInputError(message)
    return normalized


class AppointmentService:
    def __init__(
        self,
        session_factory: sessionmaker,
        dispatcher: NotificationDispatcher,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._settings = settings
        self._clock = clock

    def _is_doctor_of_record(self, uow: UnitOfWork, actor: Actor, appointment: Appointment) -> bool:
        return actor.role == ROLE_DOCTOR and uow.doctors.find_id_by_user_id(actor.user_id) == appointment.doctor_id

    def _is_patient_of_record(self, uow: UnitOfWork, actor: Actor, patient_id: int) -> bool:
        return actor.role == ROLE_PATIENT and uow.patients.find_id_by_user_id(actor.user_id) == patient_id

    def _load(self, uow: UnitOfWork, appointment_id: int) -> Appointment:
        appointment = uow.appointments.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError('Appointment not found.')
        return appointment

    def _ensure_slot_free(
        self,
        uow: UnitOfWork,
        doctor_id: int,
        start: datetime,
        duration_minutes: int,
        exclude_appointment_id: int | None = None,
    ) -> None:
        end = start + timedelta(minutes=duration_minutes)
        existing = uow.appointments.find_by_doctor_and_date_range(doctor_id, start, end)
        conflict = find_conflict(existing, start, end, exclude_appointment_id=exclude_appointment_id)
        if conflict is not None:
            raise SlotUnavailable()

    def create_appointment(
        self,
        actor: Actor,
        patient_id: int,
        doctor_id: int,
        service_id: int,
        scheduled_at: datetime,
        reason: str,
    ) -> Appointment:
        reason = _require_text(reason, 'Appointment reason is required.')
        scheduled_at = _to_clinic_time(scheduled_at)

        with UnitOfWork(self._session_factory) as uow:
            if not actor.is_admin and not self._is_patient_of_record(uow, actor, patient_id):
                raise ForbiddenError('Patients can only book appointments for themselves.')

            now = self._clock()
            if scheduled_at <= now:
                raise PastSchedule('Appointments must be scheduled in the future.')

            patient = uow.patients.find_by_id(patient_id)
            if patient is None:
                raise NotFoundError('Patient not found.')
            if not patient.is_active:
                raise InactiveError('Patient is not active.')

            doctor = uow.doctors.lock(doctor_id)
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

            self._ensure_slot_free(uow, doctor_id, scheduled_at, service.duration_minutes)

            appointment = uow.appointments.create(
                Appointment(
                    patient_id=patient_id,
                    doctor_id=doctor_id,
                    service_id=service_id,
                    scheduled_at=scheduled_at,
                    duration_minutes=service.duration_minutes,
                    reason=reason,
                    notes='',
                    status=STATUS_PENDING,
                    created_at=now,
                    updated_at=now,
                    reminder_24h_sent=False,
                    reminder_1h_sent=False,
                )
            )
            notice, recipients = build_notice(uow, appointment)
            uow.commit()

        logger.info('Created appointment %s for doctor %s at %s', appointment.id, doctor_id, scheduled_at)
        self._dispatcher.submit(EVENT_CREATED, recipients.patient, notice)
        return appointment

    def confirm_appointment(self, actor: Actor, appointment_id: int) -> Appointment:
        with UnitOfWork(self._session_factory) as uow:
            appointment = self._load(uow, appointment_id)
            if not actor.is_admin and not self._is_doctor_of_record(uow, actor, appointment):
                raise ForbiddenError('Only the doctor or an admin can confirm this appointment.')

            _ensure_not_terminal(appointment)
            if appointment.status != STATUS_PENDING:
                raise InvalidStateTransition('Only pending appointments can be confirmed.')

            now = self._clock()
            if appointment.scheduled_at <= now:
                raise PastSchedule('Cannot confirm an appointment scheduled in the past.')

            appointment.status = STATUS_CONFIRMED
            appointment.updated_at = now
            uow.appointments.update(appointment)
            notice, recipients = build_notice(uow, appointment)
            uow.commit()

        self._dispatcher.submit(EVENT_CONFIRMED, recipients.patient, notice)
        return appointment

    def complete_appointment(self, actor: Actor, appointment_id: int, notes: str | None = None) -> Appointment:
        with UnitOfWork(self._session_factory) as uow:
            appointment = self._load(uow, appointment_id)
            if not actor.is_admin and not self._is_doctor_of_record(uow, actor, appointment):
                raise ForbiddenError('Only the doctor or an admin can complete this appointment.')

            _ensure_not_terminal(appointment)
            if appointment.status != STATUS_CONFIRMED:
                raise InvalidStateTransition('Only confirmed appointments can be completed.')

            appointment.status = STATUS_COMPLETED
            if notes is not None:
                appointment.notes = notes.strip()
            appointment.updated_at = self._clock()
            uow.appointments.update(appointment)
            notice, recipients = build_notice(uow, appointment, notes=appointment.notes or '')
            uow.commit()

        self._dispatcher.submit(EVENT_COMPLETED, recipients.patient, notice)
        return appointment

    def cancel_appointment(self, actor: Actor, appointment_id: int, reason: str) -> Appointment:
        with UnitOfWork(self._session_factory) as uow:
            appointment = self._load(uow, appointment_id)
            if not (
                actor.is_admin
                or self._is_patient_of_record(uow, actor, appointment.patient_id)
                or self._is_doctor_of_record(uow, actor, appointment)
            ):
                raise ForbiddenError('Insufficient permissions to cancel this appointment.')

            _ensure_not_terminal(appointment)

            now = self._clock()
            notice_window = timedelta(hours=self._settings.cancellation_notice_hours)
            if appointment.scheduled_at - now < notice_window:
                raise TooLateToCancel(
                    f'Appointment must be cancelled at least {self._settings.cancellation_notice_hours} hours in advance.'
                )

            reason = _require_text(reason, 'Cancellation reason is required.')

            appointment.status = STATUS_CANCELLED
            appointment.cancelled_at = now
            appointment.cancellation_reason = reason
            appointment.updated_at = now
            uow.appointments.update(appointment)
            notice, recipients = build_notice(uow, appointment, reason=reason)
            uow.commit()

        logger.info('Cancelled appointment %s', appointment.id)
        self._dispatcher.submit(EVENT_CANCELLED, recipients.patient, notice)
        self._dispatcher.submit(EVENT_CANCELLED, recipients.doctor, notice)
        return appointment

    def reschedule_appointment(self, actor: Actor, appointment_id: int, new_scheduled_at: datetime) -> Appointment:
        new_scheduled_at = _to_clinic_time(new_scheduled_at)

        with UnitOfWork(self._session_factory) as uow:
            appointment = self._load(uow, appointment_id)
            if not actor.is_admin and not self._is_patient_of_record(uow, actor, appointment.patient_id):
                raise ForbiddenError('Insufficient permissions to reschedule this appointment.')

            _ensure_not_terminal(appointment)

            now = self._clock()
            if new_scheduled_at <= now:
                raise PastSchedule('New appointment time must be in the future.')

            uow.doctors.lock(appointment.doctor_id)
            self._ensure_slot_free(
                uow,
                appointment.doctor_id,
                new_scheduled_at,
                appointment.duration_minutes,
                exclude_appointment_id=appointment.id,
            )

            moved = new_scheduled_at != appointment.scheduled_at
            appointment.scheduled_at = new_scheduled_at
            appointment.updated_at = now
            if moved and self._settings.reset_reminders_on_reschedule:
                appointment.reminder_24h_sent = False
                appointment.reminder_1h_sent = False
            uow.appointments.update(appointment)
            uow.commit()

        logger.info('Rescheduled appointment %s to %s', appointment.id, new_scheduled_at)
        return appointment

    def get_appointment(self, actor: Actor, appointment_id: int) -> Appointment:
        with UnitOfWork(self._session_factory) as uow:
            appointment = self._load(uow, appointment_id)
            if not (
                actor.is_admin
                or self._is_patient_of_record(uow, actor, appointment.patient_id)
                or self._is_doctor_of_record(uow, actor, appointment)
            ):
                raise ForbiddenError('Insufficient permissions to view this appointment.')
            return appointment

    def list_appointments(self, actor: Actor) -> list[Appointment]:
        with UnitOfWork(self._session_factory) as uow:
            if actor.is_admin:
                return uow.appointments.list_all()

            if actor.role == ROLE_DOCTOR:
                doctor_id = uow.doctors.find_id_by_user_id(actor.user_id)
                return uow.appointments.list_for_doctor(doctor_id) if doctor_id is not None else []

            if actor.role == ROLE_PATIENT:
                patient_id = uow.patients.find_id_by_user_id(actor.user_id)
                return uow.appointments.list_for_patient(patient_id) if patient_id is not None else []

            raise ForbiddenError('Unknown role.')
