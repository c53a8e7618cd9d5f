from flask_login import UserMixin
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import validates
from werkzeug.security import generate_password_hash, check_password_hash

from gymdesk.extensions import db
from gymdesk.utils.timezone import utc_now_naive

USER_ROLES = ('global_admin', 'admin', 'manager', 'coach', 'parent')


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    facility_id = Column(Integer, ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False, index=True)
    username = Column(String(80), unique=True, nullable=False)
    email = Column(String(120), unique=True, nullable=True)
    password_hash = Column(String(256))
    first_name = Column(String(50))
    last_name = Column(String(50))
    role = Column(String(20), nullable=False)  # one of USER_ROLES
    created_at = Column(DateTime, default=utc_now_naive)

    facility = db.relationship('Facility', backref='users')

    @validates('role')
    def validate_role(self, key, role):
        if role not in USER_ROLES:
            raise ValueError(f'Unknown role {role!r}')
        return role

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'facilityId': self.facility_id,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'role': self.role,
        }
