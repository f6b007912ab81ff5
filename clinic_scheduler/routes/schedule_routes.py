from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from clinic_scheduler.auth.dependencies import get_current_actor, get_registry
from clinic_scheduler.core.actors import Actor
from clinic_scheduler.routes.errors import translate_errors
from clinic_scheduler.scheduling.intervals import DAYS_OF_WEEK
from clinic_scheduler.services.registry import ServiceRegistry

router = APIRouter(tags=['schedules'])


class ScheduleRequest(BaseModel):
    day_of_week: str
    start_time: str
    end_time: str
    slot_duration_minutes: int
    active: bool = True

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in DAYS_OF_WEEK:
            raise ValueError('Invalid day of week.')
        return normalized

    @field_validator('start_time', 'end_time')
    @classmethod
    def strip_time(cls, value: str) -> str:
        return value.strip()


class CreateScheduleRequest(ScheduleRequest):
    doctor_id: int


class ScheduleResponse(BaseModel):
    id: int
    doctor_id: int
    day_of_week: str
    start_time: str
    end_time: str
    slot_duration_minutes: int
    active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TimeSlotResponse(BaseModel):
    time: str
    available: bool


@router.post('/schedules', response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    data: CreateScheduleRequest,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.schedules.create_schedule(
            actor,
            doctor_id=data.doctor_id,
            day_of_week=data.day_of_week,
            start_time=data.start_time,
            end_time=data.end_time,
            slot_duration_minutes=data.slot_duration_minutes,
            active=data.active,
        )


@router.put('/schedules/{schedule_id}', response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    data: ScheduleRequest,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.schedules.update_schedule(
            actor,
            schedule_id,
            day_of_week=data.day_of_week,
            start_time=data.start_time,
            end_time=data.end_time,
            slot_duration_minutes=data.slot_duration_minutes,
            active=data.active,
        )


@router.delete('/schedules/{schedule_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    actor: Actor = Depends(get_current_actor),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        registry.schedules.delete_schedule(actor, schedule_id)


@router.get('/doctors/{doctor_id}/schedules', response_model=list[ScheduleResponse])
def list_doctor_schedules(
    doctor_id: int,
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        return registry.schedules.get_doctor_schedules(doctor_id)


@router.get('/doctors/{doctor_id}/slots', response_model=list[TimeSlotResponse])
def list_available_slots(
    doctor_id: int,
    service_id: int = Query(...),
    slot_date: date = Query(..., alias='date'),
    registry: ServiceRegistry = Depends(get_registry),
):
    with translate_errors():
        slots = registry.slots.get_available_slots(doctor_id, service_id, slot_date)

    return [TimeSlotResponse(time=slot.start_time, available=slot.available) for slot in slots]
