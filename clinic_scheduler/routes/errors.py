import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core.errors import SchedulingError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    'not_found': status.HTTP_404_NOT_FOUND,
    'inactive': status.HTTP_400_BAD_REQUEST,
    'validation_error': status.HTTP_400_BAD_REQUEST,
    'conflict': status.HTTP_409_CONFLICT,
    'forbidden': status.HTTP_403_FORBIDDEN,
    'invalid_state_transition': status.HTTP_409_CONFLICT,
    'too_late': status.HTTP_409_CONFLICT,
    'past_schedule': status.HTTP_400_BAD_REQUEST,
}


def to_http_exception(exc: SchedulingError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        detail=exc.message,
    )


@contextmanager
def translate_errors() -> Iterator[None]:
    try:
        yield
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Database error while handling scheduling request')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc
