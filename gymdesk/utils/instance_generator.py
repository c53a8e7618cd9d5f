"""
Class instance generation.

Turns each live schedule of a class into concrete ClassInstance rows for a
date window. Generation is idempotent: a (schedule, start) pair that already
has an instance is skipped, so overlapping windows can be re-run safely.
"""
import logging

from sqlalchemy.exc import IntegrityError

from gymdesk.extensions import db
from gymdesk.exceptions import InvalidInputError
from gymdesk.models import Class, ClassInstance
from gymdesk.utils.recurrence import RecurrenceExpander
from gymdesk.utils.schedule_exceptions import cancelled_dates
from gymdesk.utils.schedule_parser import combine_date_and_time
from gymdesk.utils.schedule_registry import list_schedules

logger = logging.getLogger(__name__)


def _instance_exists(schedule_id, start_dt):
    return db.session.query(ClassInstance.id).filter_by(
        class_schedule_id=schedule_id,
        start_date_time=start_dt,
    ).first() is not None


def _persist_instance(schedule_id, start_dt, end_dt):
    """Insert one scheduled instance; False when it already exists.

    The savepoint absorbs a unique-constraint hit from a concurrent run
    without losing the rows already added in this generation.
    """
    if _instance_exists(schedule_id, start_dt):
        return False
    try:
        with db.session.begin_nested():
            db.session.add(ClassInstance(
                class_schedule_id=schedule_id,
                start_date_time=start_dt,
                end_date_time=end_dt,
                status='scheduled',
            ))
    except IntegrityError:
        logger.info('Instance for schedule %s at %s was created concurrently, skipping', schedule_id, start_dt)
        return False
    return True


def _occurrence_window(schedule, start_date, end_date):
    occurrences = RecurrenceExpander(schedule.recurrence_rule, day_of_week=schedule.day_of_week).between(
        start_date, end_date
    )
    return [
        (occurrence, combine_date_and_time(occurrence, schedule.start_time),
         combine_date_and_time(occurrence, schedule.end_time))
        for occurrence in occurrences
    ]


def generate_instances(facility_id, class_id, start_date, end_date):
    """Materialize instances of every live schedule of a class in [start_date, end_date].

    A schedule whose rule or times cannot be parsed is logged and skipped;
    the other schedules are still generated.

    Returns:
        dict: instances_created, skipped_existing, skipped_cancelled, failed_schedules
    """
    if start_date > end_date:
        raise InvalidInputError('startDate must not be after endDate', 'INVALID_DATE_RANGE')

    class_record = Class.get_for_facility(facility_id, class_id)
    schedules = list_schedules(facility_id, class_record.id)
    if not schedules:
        raise InvalidInputError('No schedules defined for this class', 'NO_SCHEDULES_DEFINED')

    summary = {
        'instances_created': 0,
        'skipped_existing': 0,
        'skipped_cancelled': 0,
        'failed_schedules': [],
    }

    for schedule in schedules:
        try:
            occurrences = _occurrence_window(schedule, start_date, end_date)
        except InvalidInputError:
            logger.exception('Failed to generate instances for schedule %s of class %s',
                             schedule.id, class_record.id)
            summary['failed_schedules'].append(schedule.id)
            continue

        cancelled = cancelled_dates(schedule.id, start_date, end_date)
        for occurrence, start_dt, end_dt in occurrences:
            if occurrence in cancelled:
                summary['skipped_cancelled'] += 1
                continue
            if _persist_instance(schedule.id, start_dt, end_dt):
                summary['instances_created'] += 1
            else:
                summary['skipped_existing'] += 1

    db.session.commit()
    logger.info(
        'Generated %d instances for class %s (%s..%s): %d existing, %d cancelled, %d failed schedules',
        summary['instances_created'], class_record.id, start_date, end_date,
        summary['skipped_existing'], summary['skipped_cancelled'], len(summary['failed_schedules']),
    )
    return summary
