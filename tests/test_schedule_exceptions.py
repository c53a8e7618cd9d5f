from datetime import date

import pytest

from gymdesk.exceptions import InvalidInputError, NotFoundError
from gymdesk.models import ScheduleException
from gymdesk.utils.schedule_exceptions import add_exception, cancelled_dates, is_cancelled_on, list_exceptions
from tests.conftest import make_class, make_facility, make_schedule


@pytest.fixture
def schedule(ctx):
    facility = make_facility()
    class_record = make_class(facility)
    return make_schedule(class_record)


def _ids(schedule):
    return schedule.class_record.facility_id, schedule.class_id, schedule.id


def test_cancelling_exception_is_visible(schedule):
    add_exception(*_ids(schedule), date(2024, 6, 17), reason='Facility closed')

    assert is_cancelled_on(schedule.id, date(2024, 6, 17))
    assert not is_cancelled_on(schedule.id, date(2024, 6, 10))


def test_writes_are_append_only(schedule):
    add_exception(*_ids(schedule), date(2024, 6, 17), reason='Meet')
    add_exception(*_ids(schedule), date(2024, 6, 17), reason='Meet, again')

    rows = list_exceptions(*_ids(schedule))
    assert len(rows) == 2
    assert ScheduleException.query.filter_by(exception_date=date(2024, 6, 17)).count() == 2


def test_any_cancelled_row_cancels_the_date(schedule):
    add_exception(*_ids(schedule), date(2024, 6, 17), is_cancelled=False)
    assert not is_cancelled_on(schedule.id, date(2024, 6, 17))

    add_exception(*_ids(schedule), date(2024, 6, 17))
    assert is_cancelled_on(schedule.id, date(2024, 6, 17))


def test_cancelled_dates_within_window(schedule):
    add_exception(*_ids(schedule), date(2024, 6, 3))
    add_exception(*_ids(schedule), date(2024, 6, 17))
    add_exception(*_ids(schedule), date(2024, 7, 1))
    add_exception(*_ids(schedule), date(2024, 6, 24), is_cancelled=False)

    assert cancelled_dates(schedule.id, date(2024, 6, 1), date(2024, 6, 30)) == {date(2024, 6, 3), date(2024, 6, 17)}


def test_reason_is_limited(schedule):
    with pytest.raises(InvalidInputError):
        add_exception(*_ids(schedule), date(2024, 6, 17), reason='x' * 201)


def test_unknown_schedule(schedule):
    facility_id, class_id, _ = _ids(schedule)
    with pytest.raises(NotFoundError) as exc_info:
        add_exception(facility_id, class_id, schedule.id + 100, date(2024, 6, 17))
    assert exc_info.value.code == 'SCHEDULE_NOT_FOUND'
