from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey

from gymdesk.extensions import db
from gymdesk.exceptions import NotFoundError
from gymdesk.utils.timezone import utc_now_naive


class Student(db.Model):
    __tablename__ = 'students'

    id = Column(Integer, primary_key=True)
    facility_id = Column(Integer, ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False, index=True)
    first_name = Column(String(100), nullable=False, index=True)
    last_name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=True)
    skill_level = Column(String(20), nullable=False, default='beginner')
    created_at = Column(DateTime, default=utc_now_naive)
    updated_at = Column(DateTime, default=utc_now_naive, onupdate=utc_now_naive)
    deleted_at = Column(DateTime, nullable=True)

    enrollments = db.relationship('Enrollment', back_populates='student', lazy='dynamic')

    @classmethod
    def get_for_facility(cls, facility_id, student_id):
        """Live student in this facility, or STUDENT_NOT_FOUND."""
        student = cls.query.filter(
            cls.facility_id == facility_id,
            cls.id == student_id,
            cls.deleted_at.is_(None),
        ).first()
        if student is None:
            raise NotFoundError('Student not found', 'STUDENT_NOT_FOUND')
        return student

    def to_dict(self):
        return {
            'id': self.id,
            'facilityId': self.facility_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'dateOfBirth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'skillLevel': self.skill_level,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Student {self.id}: {self.first_name} {self.last_name}>'
