from threading import Lock
from weakref import WeakSet

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

_schema_lock = Lock()
_schema_checked: WeakSet = WeakSet()

SCHEDULING_INDEXES = {
    'appointments': [
        'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_scheduled ON appointments(doctor_id, scheduled_at)',
        'CREATE INDEX IF NOT EXISTS idx_appointments_status_scheduled ON appointments(status, scheduled_at)',
    ],
    'schedule_blocks': [
        'CREATE INDEX IF NOT EXISTS idx_schedule_blocks_doctor_day ON schedule_blocks(doctor_id, day_of_week)',
    ],
}


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith('sqlite') and (':memory:' in url or url.rstrip('/') in {'sqlite:', 'sqlite://'})


def _serialize_sqlite_writers(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write; take the write lock up front instead.
    @event.listens_for(engine, 'connect')
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def _begin_immediate(connection):
        connection.exec_driver_sql('BEGIN IMMEDIATE')


def create_database_engine(database_url: str) -> Engine:
    if _is_memory_sqlite(database_url):
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )

    if database_url.startswith('sqlite'):
        engine = create_engine(database_url, connect_args={'check_same_thread': False, 'timeout': 30})
        _serialize_sqlite_writers(engine)
        return engine

    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_schema(engine: Engine) -> None:
    from clinic_scheduler.models import appointment, doctor, patient, schedule, service, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    ensure_scheduling_schema(engine)


def ensure_scheduling_schema(engine: Engine) -> None:
    if engine in _schema_checked:
        return

    with _schema_lock:
        if engine in _schema_checked:
            return

        existing_tables = set(inspect(engine).get_table_names())

        with engine.begin() as connection:
            for table_name, statements in SCHEDULING_INDEXES.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        _schema_checked.add(engine)
