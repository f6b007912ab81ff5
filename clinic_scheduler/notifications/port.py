import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

EVENT_CREATED = 'created'
EVENT_CONFIRMED = 'confirmed'
EVENT_CANCELLED = 'cancelled'
EVENT_COMPLETED = 'completed'
EVENT_REMINDER = 'reminder'


@dataclass(frozen=True)
class AppointmentNotice:
    appointment_id: int
    patient_name: str
    doctor_name: str
    service_name: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    reason: str = ''
    notes: str = ''
    reminder_window: str = ''


class NotificationPort(Protocol):
    """Outbound notifications. Implementations raise on delivery failure."""

    def send_appointment_created(self, recipient: str, notice: AppointmentNotice) -> None: ...

    def send_appointment_confirmed(self, recipient: str, notice: AppointmentNotice) -> None: ...

    def send_appointment_cancelled(self, recipient: str, notice: AppointmentNotice) -> None: ...

    def send_appointment_completed(self, recipient: str, notice: AppointmentNotice) -> None: ...

    def send_appointment_reminder(self, recipient: str, notice: AppointmentNotice) -> None: ...


class LoggingNotifier:
    """Default adapter: records each notice in the application log."""

    def _log(self, event: str, recipient: str, notice: AppointmentNotice) -> None:
        logger.info(
            'Appointment %s notice for appointment %s to %s (%s %s with %s)',
            event,
            notice.appointment_id,
            recipient,
            notice.date,
            notice.time,
            notice.doctor_name,
        )

    def send_appointment_created(self, recipient: str, notice: AppointmentNotice) -> None:
        self._log(EVENT_CREATED, recipient, notice)

    def send_appointment_confirmed(self, recipient: str, notice: AppointmentNotice) -> None:
        self._log(EVENT_CONFIRMED, recipient, notice)

    def send_appointment_cancelled(self, recipient: str, notice: AppointmentNotice) -> None:
        self._log(EVENT_CANCELLED, recipient, notice)

    def send_appointment_completed(self, recipient: str, notice: AppointmentNotice) -> None:
        self._log(EVENT_COMPLETED, recipient, notice)

    def send_appointment_reminder(self, recipient: str, notice: AppointmentNotice) -> None:
        self._log(f'{EVENT_REMINDER} ({notice.reminder_window})', recipient, notice)


def deliver(notifier: NotificationPort, event: str, recipient: str, notice: AppointmentNotice) -> None:
    getattr(notifier, f'send_appointment_{event}')(recipient, notice)
