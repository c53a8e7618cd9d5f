from sqlalchemy import Column, Integer, String, DateTime

from gymdesk.extensions import db
from gymdesk.exceptions import NotFoundError
from gymdesk.utils.timezone import utc_now_naive


class Facility(db.Model):
    __tablename__ = 'facilities'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    time_zone = Column(String(50), nullable=False, default='America/New_York')
    created_at = Column(DateTime, default=utc_now_naive)

    @classmethod
    def get_or_404(cls, facility_id):
        facility = db.session.get(cls, facility_id)
        if facility is None:
            raise NotFoundError('Facility not found', 'FACILITY_NOT_FOUND')
        return facility

    def __repr__(self):
        return f'<Facility {self.id}: {self.name}>'
