from datetime import date
from decimal import Decimal

import pytest

from gymdesk.app import create_app
from gymdesk.config import TestConfig
from gymdesk.models import db, Facility, User, Student, Class, ClassSchedule

PASSWORD = 'correct-horse-battery'


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Push an app context for tests that call the service layer directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_facility(name='Tumble Town', time_zone='America/New_York'):
    facility = Facility(name=name, time_zone=time_zone)
    db.session.add(facility)
    db.session.commit()
    return facility


def make_user(facility, username, role='admin'):
    user = User(facility_id=facility.id, username=username, email=f'{username}@example.com', role=role)
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


def make_student(facility, first_name='Simone', last_name='Biles'):
    student = Student(facility_id=facility.id, first_name=first_name, last_name=last_name)
    db.session.add(student)
    db.session.commit()
    return student


def make_class(facility, name='Beginner Tumbling', max_capacity=10, **overrides):
    fields = dict(
        facility_id=facility.id,
        name=name,
        skill_level='beginner',
        max_capacity=max_capacity,
        coach_ids=[1],
        price_per_month=Decimal('120.00'),
    )
    fields.update(overrides)
    class_record = Class(**fields)
    db.session.add(class_record)
    db.session.commit()
    return class_record


def make_schedule(class_record, day_of_week=1, start_time='09:00', end_time='10:00',
                  recurrence_rule='FREQ=WEEKLY;BYDAY=MO'):
    """Insert a schedule row directly, bypassing rule validation."""
    schedule = ClassSchedule(
        class_id=class_record.id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        recurrence_rule=recurrence_rule,
    )
    db.session.add(schedule)
    db.session.commit()
    return schedule


def login(client, username):
    response = client.post('/auth/login', json={'username': username, 'password': PASSWORD})
    assert response.status_code == 200, response.get_json()
    return response


@pytest.fixture
def seeded(app):
    """Facility with an admin, a manager, a coach and one class; returns plain ids."""
    with app.app_context():
        facility = make_facility()
        make_user(facility, 'admin', 'admin')
        make_user(facility, 'manager', 'manager')
        make_user(facility, 'coach', 'coach')
        class_record = make_class(facility)
        return {'facility_id': facility.id, 'class_id': class_record.id}


JUNE_2024 = (date(2024, 6, 1), date(2024, 6, 30))
