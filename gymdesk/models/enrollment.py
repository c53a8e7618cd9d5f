from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, Index, text

from gymdesk.extensions import db
from gymdesk.utils.timezone import utc_now_naive

ENROLLMENT_STATUSES = ('active', 'paused', 'completed', 'cancelled')
# Statuses that still hold the student in the class
LIVE_ENROLLMENT_STATUSES = ('active', 'paused')

_LIVE_ENROLLMENT_PREDICATE = text("deleted_at IS NULL AND status IN ('active', 'paused')")


class Enrollment(db.Model):
    __tablename__ = 'enrollments'
    __table_args__ = (
        Index(
            'uq_enrollments_live_class_student',
            'class_id', 'student_id',
            unique=True,
            postgresql_where=_LIVE_ENROLLMENT_PREDICATE,
            sqlite_where=_LIVE_ENROLLMENT_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True)
    class_id = Column(Integer, ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey('students.id', ondelete='CASCADE'), nullable=False, index=True)
    enrollment_date = Column(DateTime, nullable=False, default=utc_now_naive)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default='active')
    # Allocation order marker, never renumbered after cancellations
    position = Column(Integer, nullable=False)
    is_waitlisted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utc_now_naive)
    updated_at = Column(DateTime, default=utc_now_naive, onupdate=utc_now_naive)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    student = db.relationship('Student', back_populates='enrollments')
    class_record = db.relationship('Class', back_populates='enrollments')

    def to_dict(self):
        return {
            'id': self.id,
            'classId': self.class_id,
            'studentId': self.student_id,
            'enrollmentDate': self.enrollment_date.isoformat() if self.enrollment_date else None,
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat() if self.end_date else None,
            'status': self.status,
            'position': self.position,
            'isWaitlisted': bool(self.is_waitlisted),
        }
