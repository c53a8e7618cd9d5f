from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from gymdesk.extensions import db
from gymdesk.utils.timezone import utc_now_naive

INSTANCE_STATUSES = ('scheduled', 'in_progress', 'completed', 'cancelled')


class ClassInstance(db.Model):
    __tablename__ = 'class_instances'
    __table_args__ = (
        UniqueConstraint('class_schedule_id', 'start_date_time', name='uq_class_instances_schedule_start'),
    )

    id = Column(Integer, primary_key=True)
    class_schedule_id = Column(Integer, ForeignKey('class_schedules.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    # Facility wall-clock time, naive
    start_date_time = Column(DateTime, nullable=False, index=True)
    end_date_time = Column(DateTime, nullable=False)
    actual_start_date_time = Column(DateTime, nullable=True)
    actual_end_date_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default='scheduled')
    created_at = Column(DateTime, default=utc_now_naive)
    updated_at = Column(DateTime, default=utc_now_naive, onupdate=utc_now_naive)

    schedule = db.relationship('ClassSchedule', back_populates='instances')

    def to_dict(self):
        return {
            'id': self.id,
            'classScheduleId': self.class_schedule_id,
            'startDateTime': self.start_date_time.isoformat(),
            'endDateTime': self.end_date_time.isoformat(),
            'actualStartDateTime': self.actual_start_date_time.isoformat() if self.actual_start_date_time else None,
            'actualEndDateTime': self.actual_end_date_time.isoformat() if self.actual_end_date_time else None,
            'status': self.status,
        }
