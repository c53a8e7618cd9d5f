import logging

from gymdesk.extensions import db
from gymdesk.exceptions import InvalidInputError
from gymdesk.models import ScheduleException
from gymdesk.utils.schedule_registry import get_schedule

logger = logging.getLogger(__name__)


def add_exception(facility_id, class_id, schedule_id, exception_date, reason=None, is_cancelled=True):
    """Record a one-off exception for a schedule date.

    Writes are append-only: a second write for the same date adds another row.
    """
    schedule = get_schedule(facility_id, class_id, schedule_id)
    if reason is not None and (not isinstance(reason, str) or len(reason) > 200):
        raise InvalidInputError('reason must be text of at most 200 characters', 'VALIDATION_ERROR')
    exception = ScheduleException(
        class_schedule_id=schedule.id,
        exception_date=exception_date,
        reason=reason,
        is_cancelled=bool(is_cancelled),
    )
    db.session.add(exception)
    db.session.commit()
    logger.info('Schedule %s exception on %s (cancelled=%s)', schedule.id, exception_date, exception.is_cancelled)
    return exception


def list_exceptions(facility_id, class_id, schedule_id):
    schedule = get_schedule(facility_id, class_id, schedule_id)
    return (
        ScheduleException.query
        .filter_by(class_schedule_id=schedule.id)
        .order_by(ScheduleException.exception_date, ScheduleException.id)
        .all()
    )


def is_cancelled_on(schedule_id, exception_date):
    """True if any exception row cancels this schedule on that date."""
    return db.session.query(ScheduleException.id).filter(
        ScheduleException.class_schedule_id == schedule_id,
        ScheduleException.exception_date == exception_date,
        ScheduleException.is_cancelled.is_(True),
    ).first() is not None


def cancelled_dates(schedule_id, start_date, end_date):
    """Set of cancelled dates for a schedule within [start_date, end_date]."""
    rows = db.session.query(ScheduleException.exception_date).filter(
        ScheduleException.class_schedule_id == schedule_id,
        ScheduleException.exception_date >= start_date,
        ScheduleException.exception_date <= end_date,
        ScheduleException.is_cancelled.is_(True),
    ).all()
    return {row.exception_date for row in rows}
