from datetime import date, datetime

import pytest

from gymdesk.exceptions import InvalidInputError, NotFoundError
from gymdesk.models import ClassInstance
from gymdesk.utils import instance_generator
from gymdesk.utils.instance_generator import generate_instances
from gymdesk.utils.schedule_exceptions import add_exception
from gymdesk.utils.schedule_registry import add_schedule, remove_schedule
from tests.conftest import JUNE_2024, make_class, make_facility, make_schedule


@pytest.fixture
def monday_class(ctx):
    facility = make_facility()
    class_record = make_class(facility)
    schedule = add_schedule(facility.id, class_record.id, 1, '09:00', '10:00', 'FREQ=WEEKLY;BYDAY=MO')
    return facility, class_record, schedule


def test_generates_four_mondays_in_june(monday_class):
    facility, class_record, schedule = monday_class

    summary = generate_instances(facility.id, class_record.id, *JUNE_2024)

    assert summary['instances_created'] == 4
    assert summary['failed_schedules'] == []
    instances = ClassInstance.query.order_by(ClassInstance.start_date_time).all()
    assert [i.start_date_time for i in instances] == [
        datetime(2024, 6, 3, 9, 0),
        datetime(2024, 6, 10, 9, 0),
        datetime(2024, 6, 17, 9, 0),
        datetime(2024, 6, 24, 9, 0),
    ]
    assert all(i.end_date_time.hour == 10 and i.status == 'scheduled' for i in instances)
    assert all(i.class_schedule_id == schedule.id for i in instances)


def test_second_run_creates_nothing(monday_class):
    facility, class_record, _ = monday_class
    generate_instances(facility.id, class_record.id, *JUNE_2024)

    summary = generate_instances(facility.id, class_record.id, *JUNE_2024)

    assert summary['instances_created'] == 0
    assert summary['skipped_existing'] == 4
    assert ClassInstance.query.count() == 4


def test_overlapping_windows_do_not_duplicate(monday_class):
    facility, class_record, _ = monday_class
    generate_instances(facility.id, class_record.id, date(2024, 6, 1), date(2024, 6, 15))

    summary = generate_instances(facility.id, class_record.id, date(2024, 6, 8), date(2024, 6, 30))

    assert summary['instances_created'] == 2
    assert summary['skipped_existing'] == 1
    assert ClassInstance.query.count() == 4


def test_cancelled_exception_suppresses_instance(monday_class):
    facility, class_record, schedule = monday_class
    add_exception(facility.id, class_record.id, schedule.id, date(2024, 6, 17), reason='Competition')

    summary = generate_instances(facility.id, class_record.id, *JUNE_2024)

    assert summary['instances_created'] == 3
    assert summary['skipped_cancelled'] == 1
    starts = {i.start_date_time.date() for i in ClassInstance.query.all()}
    assert date(2024, 6, 17) not in starts


def test_malformed_schedule_does_not_block_siblings(monday_class):
    facility, class_record, good = monday_class
    broken = make_schedule(class_record, day_of_week=3, recurrence_rule='FREQ=NEVER;BYDAY=WE')

    summary = generate_instances(facility.id, class_record.id, *JUNE_2024)

    assert summary['instances_created'] == 4
    assert summary['failed_schedules'] == [broken.id]
    assert {i.class_schedule_id for i in ClassInstance.query.all()} == {good.id}


def test_removed_schedules_are_not_generated(monday_class):
    facility, class_record, schedule = monday_class
    add_schedule(facility.id, class_record.id, 3, '17:00', '18:00', 'FREQ=WEEKLY;BYDAY=WE')
    remove_schedule(facility.id, class_record.id, schedule.id)

    summary = generate_instances(facility.id, class_record.id, *JUNE_2024)

    assert summary['instances_created'] == 4
    assert all(i.start_date_time.hour == 17 for i in ClassInstance.query.all())


def test_class_without_schedules(ctx):
    facility = make_facility()
    class_record = make_class(facility)

    with pytest.raises(InvalidInputError) as exc_info:
        generate_instances(facility.id, class_record.id, *JUNE_2024)
    assert exc_info.value.code == 'NO_SCHEDULES_DEFINED'


def test_inverted_window(monday_class):
    facility, class_record, _ = monday_class

    with pytest.raises(InvalidInputError) as exc_info:
        generate_instances(facility.id, class_record.id, date(2024, 6, 30), date(2024, 6, 1))
    assert exc_info.value.code == 'INVALID_DATE_RANGE'


def test_unknown_class(ctx):
    facility = make_facility()

    with pytest.raises(NotFoundError) as exc_info:
        generate_instances(facility.id, 999, *JUNE_2024)
    assert exc_info.value.code == 'CLASS_NOT_FOUND'


def test_biweekly_schedule_keeps_its_phase_across_runs(ctx):
    facility = make_facility()
    class_record = make_class(facility)
    add_schedule(facility.id, class_record.id, 1, '09:00', '10:00', 'FREQ=WEEKLY;INTERVAL=2;BYDAY=MO')

    generate_instances(facility.id, class_record.id, date(2024, 6, 3), date(2024, 6, 30))
    summary = generate_instances(facility.id, class_record.id, date(2024, 6, 10), date(2024, 7, 7))

    assert summary['instances_created'] == 1
    assert summary['skipped_existing'] == 1
    starts = [i.start_date_time.date() for i in ClassInstance.query.order_by(ClassInstance.start_date_time)]
    assert starts == [date(2024, 6, 3), date(2024, 6, 17), date(2024, 7, 1)]


def test_concurrent_insert_is_counted_as_existing(monday_class, monkeypatch):
    """A row written by another run between the lookup and the insert hits
    the (schedule, start) unique constraint; the savepoint skips it and keeps
    the rows already added in this run."""
    facility, class_record, _ = monday_class
    generate_instances(facility.id, class_record.id, date(2024, 6, 1), date(2024, 6, 15))
    monkeypatch.setattr(instance_generator, '_instance_exists', lambda schedule_id, start_dt: False)

    summary = generate_instances(facility.id, class_record.id, *JUNE_2024)

    assert summary['instances_created'] == 2
    assert summary['skipped_existing'] == 2
    assert ClassInstance.query.count() == 4
