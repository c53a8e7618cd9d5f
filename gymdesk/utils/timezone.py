"""
Timezone helpers.

Bookkeeping columns (created_at, updated_at, deleted_at) hold naive UTC.
Class instance timestamps hold naive wall-clock time in the facility's own
time zone, so "Monday 09:00" stays 09:00 across DST changes.
"""
import logging
from datetime import datetime

import pytz
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

FALLBACK_TIME_ZONE = 'America/New_York'


def utc_now_naive():
    """
    Get current UTC datetime as naive (no timezone info).

    Returns:
        datetime: Current UTC datetime without tzinfo
    """
    return datetime.now(pytz.UTC).replace(tzinfo=None)


def get_facility_tz(tz_name=None):
    """
    Resolve a facility time zone name to a pytz timezone.

    Unknown or empty names fall back to the configured DEFAULT_TIME_ZONE.
    """
    default_name = FALLBACK_TIME_ZONE
    if has_app_context():
        default_name = current_app.config.get('DEFAULT_TIME_ZONE', FALLBACK_TIME_ZONE)
    name = tz_name or default_name
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning('Unknown time zone %r, using %s', name, default_name)
        return pytz.timezone(default_name)


def facility_now(tz_name=None):
    """Current datetime in the facility time zone (timezone-aware)."""
    return datetime.now(get_facility_tz(tz_name))


def facility_today(tz_name=None):
    """Current calendar date as seen by the facility."""
    return facility_now(tz_name).date()
