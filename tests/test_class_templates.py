from decimal import Decimal

import pytest

from gymdesk.exceptions import InvalidInputError, NotFoundError
from gymdesk.models import Class
from gymdesk.utils.class_templates import apply_template, create_template, list_templates
from gymdesk.utils.schedule_registry import list_schedules
from tests.conftest import make_facility

TEMPLATE_DATA = {
    'name': 'Preschool Tumbling',
    'skillLevel': 'beginner',
    'maxCapacity': 8,
    'coachIds': [3],
    'pricePerMonth': 95,
    'schedules': [
        {'dayOfWeek': 2, 'startTime': '16:00', 'endTime': '16:45', 'recurrenceRule': 'FREQ=WEEKLY;BYDAY=TU'},
        {'dayOfWeek': 4, 'startTime': '4:00 PM', 'endTime': '4:45 PM', 'recurrenceRule': 'FREQ=WEEKLY'},
    ],
}


def test_create_template_normalizes_schedules(ctx):
    facility = make_facility()

    template = create_template(facility.id, TEMPLATE_DATA)

    assert template.schedules[1]['startTime'] == '16:00'
    assert list_templates(facility.id) == [template]


def test_template_with_bad_schedule(ctx):
    facility = make_facility()
    data = dict(TEMPLATE_DATA, schedules=[{'dayOfWeek': 9, 'startTime': '16:00', 'endTime': '17:00',
                                           'recurrenceRule': 'FREQ=WEEKLY'}])

    with pytest.raises(InvalidInputError) as exc_info:
        create_template(facility.id, data)
    assert exc_info.value.code == 'INVALID_DAY_OF_WEEK'
    assert exc_info.value.details == {'path': 'schedules[0]'}


def test_apply_template_creates_class_and_schedules(ctx):
    facility = make_facility()
    template = create_template(facility.id, TEMPLATE_DATA)

    new_class = apply_template(facility.id, template.id, 'Preschool Tumbling (Fall)', price_per_month='110.50')

    assert new_class.name == 'Preschool Tumbling (Fall)'
    assert new_class.max_capacity == 8
    assert new_class.coach_ids == [3]
    assert new_class.price_per_month == Decimal('110.50')
    schedules = list_schedules(facility.id, new_class.id)
    assert [(s.day_of_week, s.start_time, s.end_time) for s in schedules] == [(2, '16:00', '16:45'), (4, '16:00', '16:45')]


def test_apply_requires_name(ctx):
    facility = make_facility()
    template = create_template(facility.id, TEMPLATE_DATA)

    with pytest.raises(InvalidInputError):
        apply_template(facility.id, template.id, '')
    assert Class.query.count() == 0


def test_unknown_template(ctx):
    facility = make_facility()

    with pytest.raises(NotFoundError) as exc_info:
        apply_template(facility.id, 42, 'Anything')
    assert exc_info.value.code == 'TEMPLATE_NOT_FOUND'
