import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core.config import Settings, load_settings, validate_runtime_config
from clinic_scheduler.database import init_schema
from clinic_scheduler.routes import appointment_routes, schedule_routes
from clinic_scheduler.services.registry import ServiceRegistry, build_registry

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, registry: ServiceRegistry | None = None) -> FastAPI:
    settings = settings or (registry.settings if registry else load_settings())
    validate_runtime_config(settings)
    logging.basicConfig(level=settings.log_level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    app = FastAPI(title='Clinic Scheduler')
    app.state.registry = registry or build_registry(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=['http://localhost:4200'],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.on_event('startup')
    def initialize() -> None:
        try:
            init_schema(app.state.registry.engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
            return

        if settings.reminders_enabled:
            app.state.registry.reminders.start()

    @app.on_event('shutdown')
    def shutdown() -> None:
        app.state.registry.close()

    @app.get('/')
    def root():
        return {'status': 'Clinic Scheduler API Running'}

    app.include_router(appointment_routes.router)
    app.include_router(schedule_routes.router)
    return app


app = create_app()
