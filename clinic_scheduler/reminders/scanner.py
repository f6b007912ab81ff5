"""
Reminder Scanner

Periodically finds confirmed appointments whose start falls in a window
around ``now + offset`` and sends one reminder each. The sent-flag keeps a
later tick from notifying twice; a reminder whose flag could not be stored
stays eligible and is retried by the next tick while the appointment is
still inside the window.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Event, Lock, Thread

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from clinic_scheduler.core.config import Settings
from clinic_scheduler.models.appointment import STATUS_CONFIRMED
from clinic_scheduler.notifications.notices import build_notice
from clinic_scheduler.notifications.port import NotificationPort
from clinic_scheduler.repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderRule:
    label: str
    offset: timedelta
    flag: str  # Appointment attribute recording that this reminder went out

    def mark_sent(self, uow: UnitOfWork, appointment_id: int) -> None:
        getattr(uow.appointments, f'mark_{self.flag}')(appointment_id)


REMINDER_24H = ReminderRule(label='24 hours', offset=timedelta(hours=24), flag='reminder_24h_sent')
REMINDER_1H = ReminderRule(label='1 hour', offset=timedelta(hours=1), flag='reminder_1h_sent')


@dataclass(frozen=True)
class TickResult:
    sent_24h: int = 0
    sent_1h: int = 0
    skipped: bool = False


class ReminderScanner:
    def __init__(
        self,
        session_factory: sessionmaker,
        notifier: NotificationPort,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session_factory = session_factory
        self._notifier = notifier
        self._interval = timedelta(minutes=settings.reminder_interval_minutes)
        self._tolerance = timedelta(minutes=settings.reminder_tolerance_minutes)
        self._rules = [REMINDER_24H, REMINDER_1H] if settings.reminder_1h_enabled else [REMINDER_24H]
        self._clock = clock

        self._tick_lock = Lock()
        self._stop_event = Event()
        self._thread: Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._loop, name='reminder-scanner', daemon=True)
        self._thread.start()
        logger.info('Reminder scanner started - checking every %s', self._interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer and wait for an in-flight tick to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info('Reminder scanner stopped')

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_tick()
            except Exception:
                logger.exception('Reminder tick failed')
            self._stop_event.wait(self._interval.total_seconds())

    def run_tick(self, now: datetime | None = None) -> TickResult:
        if not self._tick_lock.acquire(blocking=False):
            logger.warning('Previous reminder tick still running, skipping this one')
            return TickResult(skipped=True)

        try:
            now = now or self._clock()
            counts = {rule.flag: self._scan(rule, now) for rule in self._rules}
            return TickResult(
                sent_24h=counts.get(REMINDER_24H.flag, 0),
                sent_1h=counts.get(REMINDER_1H.flag, 0),
            )
        finally:
            self._tick_lock.release()

    def _scan(self, rule: ReminderRule, now: datetime) -> int:
        target = now + rule.offset
        window_start = target - self._tolerance
        window_end = target + self._tolerance

        try:
            with UnitOfWork(self._session_factory) as uow:
                due = [
                    (appointment.id, *build_notice(uow, appointment, reminder_window=rule.label))
                    for appointment in uow.appointments.find_by_scheduled_at_range(
                        window_start, window_end, STATUS_CONFIRMED
                    )
                    if not getattr(appointment, rule.flag)
                ]
        except SQLAlchemyError:
            logger.exception('Error finding appointments for %s reminders', rule.label)
            return 0

        sent = 0
        for appointment_id, notice, recipients in due:
            if not recipients.patient:
                logger.warning('No patient address for appointment %s, skipping %s reminder', appointment_id, rule.label)
                continue

            try:
                self._notifier.send_appointment_reminder(recipients.patient, notice)
            except Exception:
                logger.exception('Error sending %s reminder for appointment %s', rule.label, appointment_id)
                continue

            sent += 1
            try:
                with UnitOfWork(self._session_factory) as uow:
                    rule.mark_sent(uow, appointment_id)
                    uow.commit()
            except SQLAlchemyError:
                logger.error('Error marking %s reminder sent for appointment %s', rule.label, appointment_id)

        if sent:
            logger.info('Sent %d %s reminders', sent, rule.label)
        return sent
