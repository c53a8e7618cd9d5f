import logging

from gymdesk.extensions import db
from gymdesk.exceptions import InvalidInputError, NotFoundError
from gymdesk.models import Class, ClassSchedule
from gymdesk.utils.recurrence import RecurrenceExpander
from gymdesk.utils.schedule_parser import DAY_NAMES, get_day_code, normalize_time_slot
from gymdesk.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)


def validate_schedule_fields(day_of_week, start_time, end_time, recurrence_rule):
    """Check one weekly slot and return its normalized values.

    Returns:
        tuple: (day_of_week, 'HH:MM' start, 'HH:MM' end, rule text)
    """
    get_day_code(day_of_week)
    start_text, end_text = normalize_time_slot(start_time, end_time)
    if not isinstance(recurrence_rule, str) or not recurrence_rule.strip():
        raise InvalidInputError('Recurrence rule is required', 'INVALID_RECURRENCE_RULE')
    rule = recurrence_rule.strip()
    RecurrenceExpander(rule, day_of_week=day_of_week).validate()
    return day_of_week, start_text, end_text, rule


def add_schedule(facility_id, class_id, day_of_week, start_time, end_time, recurrence_rule, commit=True):
    class_record = Class.get_for_facility(facility_id, class_id)
    day_of_week, start_text, end_text, rule = validate_schedule_fields(
        day_of_week, start_time, end_time, recurrence_rule
    )
    schedule = ClassSchedule(
        class_id=class_record.id,
        day_of_week=day_of_week,
        start_time=start_text,
        end_time=end_text,
        recurrence_rule=rule,
    )
    db.session.add(schedule)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    logger.info('Added schedule %s to class %s (%s %s-%s, %s)',
                schedule.id, class_record.id, DAY_NAMES[day_of_week], start_text, end_text, rule)
    return schedule


def list_schedules(facility_id, class_id):
    """Live schedules of a live class, ordered by weekday then start time."""
    class_record = Class.get_for_facility(facility_id, class_id)
    return (
        ClassSchedule.query
        .filter(ClassSchedule.class_id == class_record.id, ClassSchedule.deleted_at.is_(None))
        .order_by(ClassSchedule.day_of_week, ClassSchedule.start_time, ClassSchedule.id)
        .all()
    )


def get_schedule(facility_id, class_id, schedule_id):
    class_record = Class.get_for_facility(facility_id, class_id)
    schedule = ClassSchedule.query.filter(
        ClassSchedule.id == schedule_id,
        ClassSchedule.class_id == class_record.id,
        ClassSchedule.deleted_at.is_(None),
    ).first()
    if schedule is None:
        raise NotFoundError('Schedule not found', 'SCHEDULE_NOT_FOUND')
    return schedule


def remove_schedule(facility_id, class_id, schedule_id):
    """Tombstone a schedule. Already generated instances are left alone."""
    schedule = get_schedule(facility_id, class_id, schedule_id)
    schedule.deleted_at = utc_now_naive()
    db.session.commit()
    logger.info('Removed schedule %s from class %s', schedule_id, class_id)
