"""
Capacity-aware enrollment.

position is the number of active enrollments in the class at the moment of
enrolling, plus one. It is an allocation-order marker: cancellations leave
gaps and later enrollments are never renumbered. is_waitlisted is decided
once, at enroll time, against the capacity the class had then.
"""
import logging

from sqlalchemy.exc import IntegrityError

from gymdesk.extensions import db
from gymdesk.exceptions import ConflictError, InvalidInputError, NotFoundError
from gymdesk.models import Class, Enrollment, Student, LIVE_ENROLLMENT_STATUSES
from gymdesk.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

# Status changes available outside enroll/unenroll
STATUS_TRANSITIONS = {
    'active': ('paused', 'completed'),
    'paused': ('active', 'completed'),
}


def _live_enrollment(class_id, student_id):
    return Enrollment.query.filter(
        Enrollment.class_id == class_id,
        Enrollment.student_id == student_id,
        Enrollment.deleted_at.is_(None),
        Enrollment.status.in_(LIVE_ENROLLMENT_STATUSES),
    ).first()


def count_active_enrollments(class_id):
    return Enrollment.query.filter(
        Enrollment.class_id == class_id,
        Enrollment.status == 'active',
        Enrollment.deleted_at.is_(None),
    ).count()


def enroll(facility_id, class_id, student_id, start_date, end_date=None):
    """Enroll a student, assigning position and waitlist flag.

    The class row is locked for the rest of the transaction so concurrent
    enrollments into the same class count seats one at a time.
    """
    if end_date is not None and end_date < start_date:
        raise InvalidInputError('endDate must not be before startDate', 'INVALID_DATE_RANGE')

    class_record = Class.get_for_facility(facility_id, class_id, lock=True)
    student = Student.get_for_facility(facility_id, student_id)

    if _live_enrollment(class_record.id, student.id) is not None:
        raise ConflictError('Student is already enrolled in this class', 'ALREADY_ENROLLED')

    position = count_active_enrollments(class_record.id) + 1
    is_waitlisted = position > class_record.max_capacity

    enrollment = Enrollment(
        class_id=class_record.id,
        student_id=student.id,
        enrollment_date=utc_now_naive(),
        start_date=start_date,
        end_date=end_date,
        status='active',
        position=position,
        is_waitlisted=is_waitlisted,
    )
    db.session.add(enrollment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Student is already enrolled in this class', 'ALREADY_ENROLLED')

    logger.info('Enrolled student %s in class %s at position %d (capacity %d, waitlisted=%s)',
                student.id, class_record.id, position, class_record.max_capacity, is_waitlisted)
    return enrollment


def get_live_enrollment(facility_id, class_id, student_id):
    class_record = Class.get_for_facility(facility_id, class_id)
    enrollment = _live_enrollment(class_record.id, student_id)
    if enrollment is None:
        raise NotFoundError('Enrollment not found', 'ENROLLMENT_NOT_FOUND')
    return enrollment


def unenroll(facility_id, class_id, student_id):
    """Cancel and tombstone the student's enrollment. Other positions stay as they are."""
    enrollment = get_live_enrollment(facility_id, class_id, student_id)
    enrollment.status = 'cancelled'
    enrollment.deleted_at = utc_now_naive()
    db.session.commit()
    logger.info('Unenrolled student %s from class %s (position %d released)',
                student_id, class_id, enrollment.position)


def set_enrollment_status(facility_id, class_id, student_id, status):
    """Pause, resume or complete a live enrollment. Position and waitlist flag are kept."""
    enrollment = get_live_enrollment(facility_id, class_id, student_id)
    if status == enrollment.status:
        return enrollment
    allowed = STATUS_TRANSITIONS.get(enrollment.status, ())
    if status not in allowed:
        raise ConflictError(
            f'Cannot change enrollment status from {enrollment.status} to {status}',
            'INVALID_STATUS_TRANSITION',
        )
    enrollment.status = status
    db.session.commit()
    logger.info('Enrollment %s status set to %s', enrollment.id, status)
    return enrollment


def list_enrollments(facility_id, class_id, page=1, limit=50):
    class_record = Class.get_for_facility(facility_id, class_id)
    pagination = (
        Enrollment.query
        .filter(Enrollment.class_id == class_record.id, Enrollment.deleted_at.is_(None))
        .order_by(Enrollment.position, Enrollment.created_at, Enrollment.id)
        .paginate(page=page, per_page=limit, error_out=False)
    )
    return {
        'items': pagination.items,
        'total': pagination.total,
        'page': page,
        'limit': limit,
        'pages': pagination.pages,
    }
