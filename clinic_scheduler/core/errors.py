"""Error kinds raised by the scheduling core.

Every error carries a stable ``kind`` so the delivery layer can render a
precise message and status without inspecting class names.
"""


class SchedulingError(Exception):
    kind = 'scheduling_error'
    default_message = 'Scheduling request failed.'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(SchedulingError):
    kind = 'not_found'
    default_message = 'Resource not found.'


class InactiveError(SchedulingError):
    kind = 'inactive'
    default_message = 'Resource is not active.'


class InvalidInputError(SchedulingError):
    kind = 'validation_error'
    default_message = 'Invalid input.'


class InvalidTimeFormat(InvalidInputError):
    default_message = 'Invalid time format, must be HH:MM.'


class InvalidRange(InvalidInputError):
    default_message = 'Start time must be before end time.'


class InvalidDuration(InvalidInputError):
    default_message = 'Duration must be greater than 0 minutes.'


class ConflictError(SchedulingError):
    kind = 'conflict'
    default_message = 'Conflicting schedule.'


class OverlapConflict(ConflictError):
    default_message = 'Schedule overlaps with an existing schedule for this day.'


class SlotUnavailable(ConflictError):
    default_message = 'Time slot is not available.'


class ForbiddenError(SchedulingError):
    kind = 'forbidden'
    default_message = 'Insufficient permissions.'


class InvalidStateTransition(SchedulingError):
    kind = 'invalid_state_transition'
    default_message = 'Appointment cannot move to the requested status.'


class AlreadyCancelled(InvalidStateTransition):
    default_message = 'Appointment is already cancelled.'


class AlreadyCompleted(InvalidStateTransition):
    default_message = 'Completed appointment cannot be changed.'


class TooLateToCancel(SchedulingError):
    kind = 'too_late'
    default_message = 'Appointment must be cancelled at least 24 hours in advance.'


class PastSchedule(SchedulingError):
    kind = 'past_schedule'
    default_message = 'Appointment time must be in the future.'
