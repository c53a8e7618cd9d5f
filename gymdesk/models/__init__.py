from gymdesk.extensions import db
from gymdesk.models.facility import Facility
from gymdesk.models.user import User, USER_ROLES
from gymdesk.models.student import Student
from gymdesk.models.class_model import Class, SKILL_LEVELS
from gymdesk.models.class_schedule import ClassSchedule
from gymdesk.models.schedule_exception import ScheduleException
from gymdesk.models.class_instance import ClassInstance, INSTANCE_STATUSES
from gymdesk.models.enrollment import Enrollment, ENROLLMENT_STATUSES, LIVE_ENROLLMENT_STATUSES
from gymdesk.models.class_template import ClassTemplate

__all__ = [
    'db',
    'Facility',
    'User',
    'USER_ROLES',
    'Student',
    'Class',
    'SKILL_LEVELS',
    'ClassSchedule',
    'ScheduleException',
    'ClassInstance',
    'INSTANCE_STATUSES',
    'Enrollment',
    'ENROLLMENT_STATUSES',
    'LIVE_ENROLLMENT_STATUSES',
    'ClassTemplate',
]
