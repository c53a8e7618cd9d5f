from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, JSON

from gymdesk.extensions import db
from gymdesk.utils.timezone import utc_now_naive


class ClassTemplate(db.Model):
    __tablename__ = 'class_templates'

    id = Column(Integer, primary_key=True)
    facility_id = Column(Integer, ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    # [{'dayOfWeek': int, 'startTime': 'HH:MM', 'endTime': 'HH:MM', 'recurrenceRule': str}, ...]
    schedules = Column(JSON, nullable=False, default=list)
    skill_level = Column(String(20), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    coach_ids = Column(JSON, nullable=False, default=list)
    price_per_month = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=utc_now_naive)
    deleted_at = Column(DateTime, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'facilityId': self.facility_id,
            'name': self.name,
            'description': self.description,
            'schedules': list(self.schedules or []),
            'skillLevel': self.skill_level,
            'maxCapacity': self.max_capacity,
            'coachIds': list(self.coach_ids or []),
            'pricePerMonth': float(self.price_per_month) if self.price_per_month is not None else None,
        }
