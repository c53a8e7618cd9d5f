import logging
from datetime import datetime, time, timedelta

from gymdesk.extensions import db
from gymdesk.exceptions import ConflictError, InvalidInputError, NotFoundError
from gymdesk.models import Class, ClassInstance, ClassSchedule, Facility, INSTANCE_STATUSES
from gymdesk.utils.schedule_exceptions import is_cancelled_on
from gymdesk.utils.timezone import facility_now

logger = logging.getLogger(__name__)

# completed and cancelled are terminal
ALLOWED_TRANSITIONS = {
    'scheduled': ('in_progress', 'cancelled'),
    'in_progress': ('completed', 'cancelled'),
    'completed': (),
    'cancelled': (),
}


def get_instance(facility_id, instance_id):
    instance = (
        ClassInstance.query
        .join(ClassSchedule, ClassInstance.class_schedule_id == ClassSchedule.id)
        .join(Class, ClassSchedule.class_id == Class.id)
        .filter(
            ClassInstance.id == instance_id,
            Class.facility_id == facility_id,
            Class.deleted_at.is_(None),
        )
        .first()
    )
    if instance is None:
        raise NotFoundError('Class instance not found', 'INSTANCE_NOT_FOUND')
    return instance


def transition_instance(facility_id, instance_id, status):
    """Move an instance along scheduled -> in_progress -> completed, or to cancelled.

    A date cancelled by a schedule exception after generation cannot be
    started. Actual start/end stamps are taken in the facility's time zone,
    matching the wall-clock start_date_time/end_date_time columns.
    """
    if status not in INSTANCE_STATUSES:
        raise InvalidInputError(
            f'status must be one of {", ".join(INSTANCE_STATUSES)}',
            'VALIDATION_ERROR',
        )
    instance = get_instance(facility_id, instance_id)
    if status not in ALLOWED_TRANSITIONS[instance.status]:
        raise ConflictError(
            f'Cannot move class instance from {instance.status} to {status}',
            'INVALID_STATUS_TRANSITION',
        )
    if status == 'in_progress' and is_cancelled_on(
        instance.class_schedule_id, instance.start_date_time.date()
    ):
        raise ConflictError(
            f'Class instance {instance.id} falls on a cancelled date',
            'INVALID_STATUS_TRANSITION',
        )

    facility = db.session.get(Facility, facility_id)
    now = facility_now(facility.time_zone if facility else None).replace(tzinfo=None)
    if status == 'in_progress':
        instance.actual_start_date_time = now
    elif status == 'completed':
        instance.actual_end_date_time = now

    previous = instance.status
    instance.status = status
    db.session.commit()
    logger.info('Class instance %s moved from %s to %s', instance.id, previous, status)
    return instance


def list_instances(facility_id, class_id, start_date=None, end_date=None, status=None):
    """Instances of a class ordered by start, optionally limited to a date window."""
    class_record = Class.get_for_facility(facility_id, class_id)
    query = (
        ClassInstance.query
        .join(ClassSchedule, ClassInstance.class_schedule_id == ClassSchedule.id)
        .filter(ClassSchedule.class_id == class_record.id)
    )
    if start_date is not None:
        query = query.filter(ClassInstance.start_date_time >= datetime.combine(start_date, time.min))
    if end_date is not None:
        query = query.filter(ClassInstance.start_date_time < datetime.combine(end_date + timedelta(days=1), time.min))
    if status is not None:
        query = query.filter(ClassInstance.status == status)
    return query.order_by(ClassInstance.start_date_time, ClassInstance.id).all()
