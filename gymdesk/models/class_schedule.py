from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from gymdesk.extensions import db
from gymdesk.utils.timezone import utc_now_naive


class ClassSchedule(db.Model):
    """A weekly time slot of a class, expanded through its recurrence rule."""
    __tablename__ = 'class_schedules'

    id = Column(Integer, primary_key=True)
    class_id = Column(Integer, ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(10), nullable=False)  # HH:MM
    end_time = Column(String(10), nullable=False)  # HH:MM
    recurrence_rule = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utc_now_naive)
    updated_at = Column(DateTime, default=utc_now_naive, onupdate=utc_now_naive)
    deleted_at = Column(DateTime, nullable=True)

    class_record = db.relationship('Class', back_populates='schedules')
    exceptions = db.relationship('ScheduleException', back_populates='schedule', lazy='dynamic',
                                 cascade='all, delete-orphan')
    instances = db.relationship('ClassInstance', back_populates='schedule', lazy='dynamic',
                                cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'classId': self.class_id,
            'dayOfWeek': self.day_of_week,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'recurrenceRule': self.recurrence_rule,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
