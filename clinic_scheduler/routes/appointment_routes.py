from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from clinic_scheduler.auth.dependencies import get_current_actor, get_registry
from clinic_scheduler.core.actors import Actor
from clinic_scheduler.routes.errors import translate_errors
from clinic_scheduler.services.registry import ServiceRegistry

router = APIRouter(tags=['appointments'])

MAX_REASON_LENGTH = 500
MAX_NOTES_LENGTH = 2000


def _strip_required(value: str, field_name: str, max_length: int) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} is required.')
    if len(normalized) > max_length:
        raise ValueError(f'{field_name} must be {max_length} characters or fewer.')
    return normalized


class CreateAppointmentRequest(BaseModel):
    patient_id: int
    doctor_id: int
    service_id: int
    scheduled_at: datetime
    reason: str

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        return _strip_required(value, 'Reason', MAX_REASON_LENGTH)


class CancelAppointmentRequest(BaseModel):
    reason: str

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        return _strip_required(value, 'Cancellation reason', MAX_REASON_LENGTH)


class CompleteAppointmentRequest(BaseModel):
    notes: str | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if len(normalized) > MAX_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_NOTES_LENGTH} characters or fewer.')
        return normalized


class RescheduleAppointmentRequest(BaseModel):
    scheduled_at: datetime


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    service_id: int
    scheduled_at: datetime
    duration_minutes: int
    reason: str
    notes: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    class Config:
        from_attributes = True


@router.post('/appointments', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.create_appointment(
            actor,
            patient_id=data.patient_id,
            doctor_id=data.doctor_id,
            service_id=data.service_id,
            scheduled_at=data.scheduled_at,
            reason=data.reason,
        )


@router.get('/appointments', response_model=list[AppointmentResponse])
def list_appointments(
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.list_appointments(actor)


@router.get('/appointments/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.get_appointment(actor, appointment_id)


@router.post('/appointments/{appointment_id}/confirm', response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.confirm_appointment(actor, appointment_id)


@router.post('/appointments/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    data: CancelAppointmentRequest,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.cancel_appointment(actor, appointment_id, data.reason)


@router.post('/appointments/{appointment_id}/complete', response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    data: CompleteAppointmentRequest,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.complete_appointment(actor, appointment_id, data.notes)


@router.post('/appointments/{appointment_id}/reschedule', response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    data: RescheduleAppointmentRequest,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.appointments.reschedule_appointment(actor, appointment_id, data.scheduled_at)
