import re
from datetime import datetime

from gymdesk.exceptions import InvalidInputError

# Indexed by day_of_week (0 = Sunday), as stored on class schedules
DAY_CODE_SEQUENCE = ['SU', 'MO', 'TU', 'WE', 'TH', 'FR', 'SA']
DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
TIME_OF_DAY_PATTERN = re.compile(r'^\d{1,2}:\d{2}\s*(?:[AaPp][Mm])?$')


def get_day_of_week_for_date(target_date):
    """Sunday-first day index for a date (date.weekday() is Monday-first)."""
    return (target_date.weekday() + 1) % 7


def get_day_code(day_of_week):
    if not isinstance(day_of_week, int) or isinstance(day_of_week, bool) or not 0 <= day_of_week <= 6:
        raise InvalidInputError(
            f'dayOfWeek must be an integer between 0 and 6, got {day_of_week!r}',
            'INVALID_DAY_OF_WEEK',
        )
    return DAY_CODE_SEQUENCE[day_of_week]


def _parse_time_token(value):
    text = (value or '').strip()
    if not text or not TIME_OF_DAY_PATTERN.match(text):
        return None
    upper_text = text.upper()
    if upper_text.endswith(('AM', 'PM')) and ' ' not in upper_text[-3:]:
        upper_text = upper_text[:-2].strip() + ' ' + upper_text[-2:]
    for fmt in ('%I:%M %p', '%H:%M'):
        try:
            return datetime.strptime(upper_text, fmt).time()
        except ValueError:
            continue
    return None


def parse_time_of_day(value, field='time'):
    """Parse 'HH:MM' (or '9:00 AM') into a datetime.time."""
    if not isinstance(value, str):
        raise InvalidInputError(f'{field} must be a string in HH:MM format', 'INVALID_SCHEDULE_TIME')
    parsed = _parse_time_token(value)
    if parsed is None:
        raise InvalidInputError(f'Invalid {field} {value!r}, expected HH:MM', 'INVALID_SCHEDULE_TIME')
    return parsed


def normalize_time_slot(start_value, end_value):
    """Validate a start/end pair and return both as zero-padded 'HH:MM' strings.

    Slots never cross midnight: end must be strictly after start on the same day.
    """
    start_time = parse_time_of_day(start_value, 'startTime')
    end_time = parse_time_of_day(end_value, 'endTime')
    if end_time <= start_time:
        raise InvalidInputError(
            f'endTime {end_value} must be after startTime {start_value}',
            'INVALID_SCHEDULE_TIME',
        )
    return start_time.strftime('%H:%M'), end_time.strftime('%H:%M')


def combine_date_and_time(occurrence_date, time_text):
    """Concrete naive datetime for a date plus a stored 'HH:MM' value."""
    return datetime.combine(occurrence_date, parse_time_of_day(time_text))
