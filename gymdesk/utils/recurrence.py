"""
Recurrence rule expansion.

Rules are RFC 5545 RRULE text, evaluated by dateutil. A rule may be a bare
body ("FREQ=WEEKLY;BYDAY=MO"), an "RRULE:" line, or a block that carries
its own DTSTART. Without DTSTART the rule is anchored at a fixed epoch moved
to the schedule's weekday, so INTERVAL phases stay the same whatever window
is expanded.
"""
import logging
import re
from datetime import date, datetime, time, timedelta

from dateutil.rrule import rrulestr

from gymdesk.exceptions import InvalidInputError, InvalidRecurrenceRule
from gymdesk.utils.schedule_parser import get_day_code

logger = logging.getLogger(__name__)

# A Sunday, so epoch + day_of_week lands on that weekday (0 = Sunday)
RECURRENCE_EPOCH = date(2000, 1, 2)

# dateutil raises a mix of these for malformed rule text
_RULE_PARSE_ERRORS = (ValueError, TypeError, KeyError, IndexError, OverflowError)
_SUB_DAILY_FREQ = re.compile(r'FREQ\s*=\s*(SECONDLY|MINUTELY|HOURLY)\b')


def pin_weekly_rule(rule, day_of_week):
    """Add BYDAY to a single-line weekly rule that has neither BYDAY nor DTSTART.

    Without this, "FREQ=WEEKLY" would fall on the anchor's weekday rather
    than the schedule's.
    """
    text = (rule or '').strip()
    upper = text.upper()
    if day_of_week is None or '\n' in text:
        return text
    if 'FREQ=WEEKLY' not in upper or 'BYDAY=' in upper or 'DTSTART' in upper:
        return text
    return f'{text.rstrip(";")};BYDAY={get_day_code(day_of_week)}'


def recurrence_anchor(day_of_week=None):
    """Fixed expansion start for rules without DTSTART."""
    anchor = RECURRENCE_EPOCH
    if day_of_week is not None:
        get_day_code(day_of_week)
        anchor += timedelta(days=day_of_week)
    return datetime.combine(anchor, time.min)


class RecurrenceExpander:
    """Expands one recurrence rule into concrete dates inside a window."""

    def __init__(self, rule, day_of_week=None):
        if not isinstance(rule, str) or not rule.strip():
            raise InvalidRecurrenceRule('Recurrence rule is required')
        self.rule = pin_weekly_rule(rule, day_of_week)
        self.anchor = recurrence_anchor(day_of_week)

        upper = self.rule.upper()
        if _SUB_DAILY_FREQ.search(upper):
            raise InvalidRecurrenceRule(
                f'Recurrence rule {self.rule!r} repeats more than once a day',
                details={'rule': self.rule},
            )
        # COUNT needs its own start, otherwise it would count from the epoch
        if 'COUNT=' in upper and 'DTSTART' not in upper:
            raise InvalidRecurrenceRule(
                f'Recurrence rule {self.rule!r} uses COUNT without DTSTART',
                details={'rule': self.rule},
            )

    def _parse(self):
        try:
            return rrulestr(self.rule, dtstart=self.anchor, forceset=True, ignoretz=True)
        except _RULE_PARSE_ERRORS as exc:
            raise InvalidRecurrenceRule(
                f'Invalid recurrence rule {self.rule!r}: {exc}',
                details={'rule': self.rule},
            ) from exc

    def validate(self):
        """Parse the rule once without expanding it."""
        self._parse()
        return self

    def between(self, start_date, end_date):
        """Ascending occurrence dates in [start_date, end_date], both inclusive."""
        if start_date > end_date:
            raise InvalidInputError(
                f'Window start {start_date} is after window end {end_date}',
                'INVALID_DATE_RANGE',
            )
        window_start = datetime.combine(start_date, time.min)
        window_end = datetime.combine(end_date, time.max)
        rule_set = self._parse()
        try:
            occurrences = rule_set.between(window_start, window_end, inc=True)
        except _RULE_PARSE_ERRORS as exc:
            raise InvalidRecurrenceRule(
                f'Recurrence rule {self.rule!r} could not be expanded: {exc}',
                details={'rule': self.rule},
            ) from exc
        dates = sorted({occurrence.date() for occurrence in occurrences})
        logger.debug('Rule %r produced %d dates in %s..%s', self.rule, len(dates), start_date, end_date)
        return dates
