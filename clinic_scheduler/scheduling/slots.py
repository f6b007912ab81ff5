"""
Slot Generation

Turns a doctor's schedule blocks for one weekday into candidate start times.
The block only defines the open window; the requested service's duration
defines the step, and a slot is emitted only if it fits entirely before the
block ends.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from clinic_scheduler.core.errors import InvalidDuration
from clinic_scheduler.models.schedule import ScheduleBlock
from clinic_scheduler.scheduling.intervals import format_hhmm, parse_hhmm


@dataclass
class TimeSlot:
    start_time: str  # HH:MM
    available: bool = True


class SlotGrid:
    """Finite, restartable sequence of candidate slots.

    Each iteration walks the blocks again, so the grid can be consumed more
    than once (for example once to resolve availability and once to count).
    """

    def __init__(self, blocks: Iterable[ScheduleBlock], service_duration_minutes: int) -> None:
        if service_duration_minutes is None or service_duration_minutes <= 0:
            raise InvalidDuration('Service duration must be greater than 0 minutes.')
        self._blocks = [block for block in blocks if block.active]
        self._duration = service_duration_minutes

    def __iter__(self) -> Iterator[TimeSlot]:
        for block in self._blocks:
            start_minutes = parse_hhmm(block.start_time)
            end_minutes = parse_hhmm(block.end_time)

            current = start_minutes
            while current + self._duration <= end_minutes:
                yield TimeSlot(start_time=format_hhmm(current))
                current += self._duration

    def __len__(self) -> int:
        return sum(1 for _ in self)


def generate_slots(blocks: Iterable[ScheduleBlock], service_duration_minutes: int) -> SlotGrid:
    """Candidate slots for the active blocks, concatenated in block order.

    No active blocks means the doctor does not work that day and the grid is
    empty.
    """
    return SlotGrid(blocks, service_duration_minutes)
