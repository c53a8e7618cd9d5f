import pytest

from gymdesk.exceptions import InvalidInputError, NotFoundError
from gymdesk.models import db, ClassSchedule
from gymdesk.utils.schedule_registry import add_schedule, get_schedule, list_schedules, remove_schedule
from tests.conftest import make_class, make_facility


def test_add_schedule_normalizes_times(ctx):
    facility = make_facility()
    class_record = make_class(facility)

    schedule = add_schedule(facility.id, class_record.id, 1, '9:00', '10:30 AM', 'FREQ=WEEKLY;BYDAY=MO')

    assert schedule.id is not None
    assert schedule.start_time == '09:00'
    assert schedule.end_time == '10:30'
    assert schedule.to_dict()['dayOfWeek'] == 1


@pytest.mark.parametrize('start, end', [('10:00', '09:00'), ('09:00', '09:00'), ('25:00', '26:00'), ('nine', '10:00')])
def test_add_schedule_rejects_bad_times(ctx, start, end):
    facility = make_facility()
    class_record = make_class(facility)

    with pytest.raises(InvalidInputError) as exc_info:
        add_schedule(facility.id, class_record.id, 1, start, end, 'FREQ=WEEKLY;BYDAY=MO')
    assert exc_info.value.code == 'INVALID_SCHEDULE_TIME'
    assert ClassSchedule.query.count() == 0


@pytest.mark.parametrize('day_of_week', [-1, 7, '1', None, True])
def test_add_schedule_rejects_bad_day(ctx, day_of_week):
    facility = make_facility()
    class_record = make_class(facility)

    with pytest.raises(InvalidInputError) as exc_info:
        add_schedule(facility.id, class_record.id, day_of_week, '09:00', '10:00', 'FREQ=WEEKLY')
    assert exc_info.value.code == 'INVALID_DAY_OF_WEEK'


def test_add_schedule_rejects_bad_rule(ctx):
    facility = make_facility()
    class_record = make_class(facility)

    with pytest.raises(InvalidInputError) as exc_info:
        add_schedule(facility.id, class_record.id, 1, '09:00', '10:00', 'FREQ=FORTNIGHTLY')
    assert exc_info.value.code == 'INVALID_RECURRENCE_RULE'


def test_add_schedule_for_other_facility_class(ctx):
    facility = make_facility()
    other = make_facility('Other Gym')
    class_record = make_class(other)

    with pytest.raises(NotFoundError) as exc_info:
        add_schedule(facility.id, class_record.id, 1, '09:00', '10:00', 'FREQ=WEEKLY')
    assert exc_info.value.code == 'CLASS_NOT_FOUND'


def test_list_orders_by_day_then_start(ctx):
    facility = make_facility()
    class_record = make_class(facility)
    add_schedule(facility.id, class_record.id, 3, '17:00', '18:00', 'FREQ=WEEKLY;BYDAY=WE')
    add_schedule(facility.id, class_record.id, 1, '17:00', '18:00', 'FREQ=WEEKLY;BYDAY=MO')
    add_schedule(facility.id, class_record.id, 1, '09:00', '10:00', 'FREQ=WEEKLY;BYDAY=MO')

    schedules = list_schedules(facility.id, class_record.id)

    assert [(s.day_of_week, s.start_time) for s in schedules] == [(1, '09:00'), (1, '17:00'), (3, '17:00')]


def test_removed_schedule_is_tombstoned(ctx):
    facility = make_facility()
    class_record = make_class(facility)
    schedule = add_schedule(facility.id, class_record.id, 1, '09:00', '10:00', 'FREQ=WEEKLY;BYDAY=MO')

    remove_schedule(facility.id, class_record.id, schedule.id)

    assert list_schedules(facility.id, class_record.id) == []
    assert db.session.get(ClassSchedule, schedule.id).deleted_at is not None
    with pytest.raises(NotFoundError) as exc_info:
        get_schedule(facility.id, class_record.id, schedule.id)
    assert exc_info.value.code == 'SCHEDULE_NOT_FOUND'
