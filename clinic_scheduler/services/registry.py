from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from clinic_scheduler.core.config import Settings
from clinic_scheduler.database import create_database_engine, create_session_factory
from clinic_scheduler.notifications.dispatcher import NotificationDispatcher
from clinic_scheduler.notifications.port import LoggingNotifier, NotificationPort
from clinic_scheduler.reminders.scanner import ReminderScanner
from clinic_scheduler.services.appointments import AppointmentService
from clinic_scheduler.services.schedules import ScheduleService
from clinic_scheduler.services.slots import SlotService


@dataclass
class ServiceRegistry:
    """Everything the delivery layer needs, wired from one ``Settings``."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    dispatcher: NotificationDispatcher
    appointments: AppointmentService
    schedules: ScheduleService
    slots: SlotService
    reminders: ReminderScanner

    def close(self) -> None:
        self.reminders.stop()
        self.dispatcher.shutdown(wait=True)
        self.engine.dispose()


def build_registry(settings: Settings, notifier: NotificationPort | None = None, engine: Engine | None = None) -> ServiceRegistry:
    notifier = notifier or LoggingNotifier()
    engine = engine or create_database_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    dispatcher = NotificationDispatcher(
        notifier,
        max_workers=settings.notification_workers,
        queue_limit=settings.notification_queue_limit,
    )

    return ServiceRegistry(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        dispatcher=dispatcher,
        appointments=AppointmentService(session_factory, dispatcher, settings),
        schedules=ScheduleService(session_factory),
        slots=SlotService(session_factory),
        reminders=ReminderScanner(session_factory, notifier, settings),
    )
