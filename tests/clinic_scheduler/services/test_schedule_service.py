import pytest

from clinic_scheduler.core.errors import (
    ForbiddenError,
    InvalidDuration,
    InvalidInputError,
    InvalidRange,
    InvalidTimeFormat,
    NotFoundError,
    OverlapConflict,
)
from clinic_scheduler.services.schedules import ScheduleService


@pytest.fixture
def schedules(session_factory, clock) -> ScheduleService:
    return ScheduleService(session_factory, clock=clock)


def test_created_block_round_trips_through_find_by_doctor_and_day(schedules, clinic) -> None:
    created = schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'Monday', '09:00', '12:00', 30)

    blocks = schedules.find_by_doctor_and_day(clinic.doctor_id, 'monday')

    assert [(b.id, b.start_time, b.end_time, b.slot_duration_minutes, b.active) for b in blocks] == [
        (created.id, '09:00', '12:00', 30, True)
    ]
    assert blocks[0].day_of_week == 'monday'


def test_create_schedule_rejects_overlapping_active_block(schedules, clinic) -> None:
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30)

    with pytest.raises(OverlapConflict):
        schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '11:30', '13:00', 30)


def test_create_schedule_allows_touching_blocks(schedules, clinic) -> None:
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30)
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '12:00', '14:00', 30)

    blocks = schedules.find_by_doctor_and_day(clinic.doctor_id, 'monday')

    assert [(b.start_time, b.end_time) for b in blocks] == [('09:00', '12:00'), ('12:00', '14:00')]


def test_create_schedule_allows_same_hours_on_other_day_or_doctor(schedules, clinic) -> None:
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30)
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'tuesday', '09:00', '12:00', 30)
    schedules.create_schedule(clinic.admin, clinic.other_doctor_id, 'monday', '09:00', '12:00', 30)

    assert len(schedules.get_doctor_schedules(clinic.doctor_id)) == 2
    assert len(schedules.get_doctor_schedules(clinic.other_doctor_id)) == 1


def test_inactive_blocks_do_not_cause_overlap(schedules, clinic) -> None:
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30, active=False)
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '10:00', '11:00', 30)

    assert len(schedules.find_by_doctor_and_day(clinic.doctor_id, 'monday')) == 2


@pytest.mark.parametrize(
    ('start', 'end', 'duration', 'error'),
    [
        ('9:00', '12:00', 30, InvalidTimeFormat),
        ('09:00', '25:00', 30, InvalidTimeFormat),
        ('12:00', '09:00', 30, InvalidRange),
        ('09:00', '09:00', 30, InvalidRange),
        ('09:00', '12:00', 0, InvalidDuration),
    ],
)
def test_create_schedule_validates_block(schedules, clinic, start, end, duration, error) -> None:
    with pytest.raises(error):
        schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', start, end, duration)


def test_create_schedule_rejects_unknown_day(schedules, clinic) -> None:
    with pytest.raises(InvalidInputError):
        schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'someday', '09:00', '10:00', 30)


def test_create_schedule_for_missing_doctor(schedules, clinic) -> None:
    with pytest.raises(NotFoundError):
        schedules.create_schedule(clinic.admin, 999, 'monday', '09:00', '10:00', 30)


def test_only_owner_or_admin_manage_schedules(schedules, clinic) -> None:
    with pytest.raises(ForbiddenError):
        schedules.create_schedule(clinic.other_doctor, clinic.doctor_id, 'monday', '09:00', '10:00', 30)

    with pytest.raises(ForbiddenError):
        schedules.create_schedule(clinic.patient, clinic.doctor_id, 'monday', '09:00', '10:00', 30)

    block = schedules.create_schedule(clinic.admin, clinic.doctor_id, 'monday', '09:00', '10:00', 30)

    with pytest.raises(ForbiddenError):
        schedules.delete_schedule(clinic.other_doctor, block.id)


def test_update_schedule_excludes_itself_from_overlap_check(schedules, clinic) -> None:
    block = schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30)

    updated = schedules.update_schedule(clinic.doctor, block.id, 'monday', '10:00', '13:00', 20)

    assert (updated.start_time, updated.end_time, updated.slot_duration_minutes) == ('10:00', '13:00', 20)


def test_update_schedule_rejects_overlap_with_other_block(schedules, clinic) -> None:
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30)
    afternoon = schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '14:00', '17:00', 30)

    with pytest.raises(OverlapConflict):
        schedules.update_schedule(clinic.doctor, afternoon.id, 'monday', '11:00', '15:00', 30)


def test_update_schedule_can_soft_disable_block(schedules, clinic) -> None:
    block = schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '09:00', '12:00', 30)

    schedules.update_schedule(clinic.doctor, block.id, 'monday', '09:00', '12:00', 30, active=False)

    assert schedules.find_by_doctor_and_day(clinic.doctor_id, 'monday')[0].active is False


def test_update_missing_schedule(schedules, clinic) -> None:
    with pytest.raises(NotFoundError):
        schedules.update_schedule(clinic.admin, 404, 'monday', '09:00', '12:00', 30)


def test_delete_schedule_removes_block(schedules, clinic) -> None:
    block = schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'friday', '09:00', '12:00', 30)

    schedules.delete_schedule(clinic.doctor, block.id)

    assert schedules.find_by_doctor_and_day(clinic.doctor_id, 'friday') == []
    with pytest.raises(NotFoundError):
        schedules.delete_schedule(clinic.doctor, block.id)


def test_get_doctor_schedules_orders_by_weekday_then_start(schedules, clinic) -> None:
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'wednesday', '09:00', '10:00', 30)
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '14:00', '15:00', 30)
    schedules.create_schedule(clinic.doctor, clinic.doctor_id, 'monday', '08:00', '09:00', 30)

    blocks = schedules.get_doctor_schedules(clinic.doctor_id)

    assert [(b.day_of_week, b.start_time) for b in blocks] == [
        ('monday', '08:00'),
        ('monday', '14:00'),
        ('wednesday', '09:00'),
    ]


def test_get_doctor_schedules_for_missing_doctor(schedules, clinic) -> None:
    with pytest.raises(NotFoundError):
        schedules.get_doctor_schedules(999)
