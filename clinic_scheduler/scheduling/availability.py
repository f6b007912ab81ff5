"""
Availability resolution and conflict detection.

Both the read side (slot listing) and the write side (create/reschedule)
decide conflicts through ``find_conflict`` so they always reach the same
verdict for the same interval.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from clinic_scheduler.models.appointment import STATUS_CANCELLED, Appointment
from clinic_scheduler.scheduling.intervals import at_clock_time, overlaps, parse_hhmm
from clinic_scheduler.scheduling.slots import TimeSlot


def blocks_time(appointment: Appointment) -> bool:
    return appointment.status != STATUS_CANCELLED


def find_conflict(
    appointments: Iterable[Appointment],
    start: datetime,
    end: datetime,
    exclude_appointment_id: int | None = None,
) -> Appointment | None:
    """Return the first non-cancelled appointment overlapping [start, end), if any."""
    for appointment in appointments:
        if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
            continue
        if not blocks_time(appointment):
            continue
        if overlaps(start, end, appointment.scheduled_at, appointment.ends_at):
            return appointment
    return None


def resolve_availability(
    candidate_slots: Iterable[TimeSlot],
    appointments: Iterable[Appointment],
    target_date: date,
    service_duration_minutes: int,
) -> list[TimeSlot]:
    existing = list(appointments)
    duration = timedelta(minutes=service_duration_minutes)

    resolved: list[TimeSlot] = []
    for slot in candidate_slots:
        slot_start = at_clock_time(target_date, parse_hhmm(slot.start_time))
        slot_end = slot_start + duration
        conflict = find_conflict(existing, slot_start, slot_end)
        resolved.append(TimeSlot(start_time=slot.start_time, available=conflict is None))

    return resolved
