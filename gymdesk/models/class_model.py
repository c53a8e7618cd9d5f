from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, JSON

from gymdesk.extensions import db
from gymdesk.exceptions import NotFoundError
from gymdesk.utils.timezone import utc_now_naive

SKILL_LEVELS = ('beginner', 'intermediate', 'advanced', 'elite')


class Class(db.Model):
    __tablename__ = 'classes'

    id = Column(Integer, primary_key=True)
    facility_id = Column(Integer, ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    skill_level = Column(String(20), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    min_age_months = Column(Integer, nullable=True)
    max_age_months = Column(Integer, nullable=True)
    coach_ids = Column(JSON, nullable=False, default=list)  # list of user ids
    price_per_month = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=utc_now_naive)
    updated_at = Column(DateTime, default=utc_now_naive, onupdate=utc_now_naive)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    facility = db.relationship('Facility', backref='classes')
    schedules = db.relationship('ClassSchedule', back_populates='class_record', lazy='dynamic')
    enrollments = db.relationship('Enrollment', back_populates='class_record', lazy='dynamic')

    @classmethod
    def get_for_facility(cls, facility_id, class_id, lock=False):
        """Live class in this facility, or CLASS_NOT_FOUND.

        lock=True issues SELECT ... FOR UPDATE so enrollment allocation for
        the same class is serialized (no-op on SQLite).
        """
        query = cls.query.filter(
            cls.facility_id == facility_id,
            cls.id == class_id,
            cls.deleted_at.is_(None),
        )
        if lock:
            query = query.with_for_update()
        class_record = query.first()
        if class_record is None:
            raise NotFoundError('Class not found', 'CLASS_NOT_FOUND')
        return class_record

    def to_dict(self):
        return {
            'id': self.id,
            'facilityId': self.facility_id,
            'name': self.name,
            'description': self.description,
            'skillLevel': self.skill_level,
            'maxCapacity': self.max_capacity,
            'minAgeMonths': self.min_age_months,
            'maxAgeMonths': self.max_age_months,
            'coachIds': list(self.coach_ids or []),
            'pricePerMonth': float(self.price_per_month) if self.price_per_month is not None else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Class {self.id}: {self.name}>'
