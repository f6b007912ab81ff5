import logging
from concurrent.futures import ThreadPoolExecutor
from threading import BoundedSemaphore

from clinic_scheduler.notifications.port import AppointmentNotice, NotificationPort, deliver

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Runs notifications on a bounded worker pool without blocking the caller.

    A notice that cannot be queued (pool saturated or shut down) is dropped
    with a warning; delivery errors are logged and never reach the caller.
    """

    def __init__(self, notifier: NotificationPort, max_workers: int = 4, queue_limit: int = 100) -> None:
        self.notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='notify')
        self._slots = BoundedSemaphore(queue_limit)

    def submit(self, event: str, recipient: str | None, notice: AppointmentNotice) -> bool:
        if not recipient:
            logger.warning('Skipping %s notification for appointment %s: no recipient', event, notice.appointment_id)
            return False

        if not self._slots.acquire(blocking=False):
            logger.warning(
                'Dropping %s notification for appointment %s: notification queue is full',
                event,
                notice.appointment_id,
            )
            return False

        try:
            self._executor.submit(self._run, event, recipient, notice)
        except RuntimeError:
            self._slots.release()
            logger.warning(
                'Dropping %s notification for appointment %s: dispatcher is shut down',
                event,
                notice.appointment_id,
            )
            return False

        return True

    def _run(self, event: str, recipient: str, notice: AppointmentNotice) -> None:
        try:
            deliver(self.notifier, event, recipient, notice)
        except Exception:
            logger.exception('Failed to send %s notification for appointment %s', event, notice.appointment_id)
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
