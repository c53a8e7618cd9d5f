from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey

from gymdesk.extensions import db
from gymdesk.utils.timezone import utc_now_naive


class ScheduleException(db.Model):
    __tablename__ = 'schedule_exceptions'

    # No unique key on (schedule, date): each admin write is its own row
    id = Column(Integer, primary_key=True)
    class_schedule_id = Column(Integer, ForeignKey('class_schedules.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    exception_date = Column(Date, nullable=False, index=True)
    reason = Column(String(200), nullable=True)
    is_cancelled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now_naive)

    schedule = db.relationship('ClassSchedule', back_populates='exceptions')

    def to_dict(self):
        return {
            'id': self.id,
            'classScheduleId': self.class_schedule_id,
            'exceptionDate': self.exception_date.isoformat(),
            'reason': self.reason,
            'isCancelled': bool(self.is_cancelled),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
