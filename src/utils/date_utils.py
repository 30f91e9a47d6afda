"""Date and timezone helpers for countdown targets.

The builder form works in wall-clock time (``YYYY-MM-DDTHH:mm`` in a chosen
IANA zone); image URLs carry the already-resolved instant as ISO-8601 UTC.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

import pytz

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = 'UTC'
FORM_DATETIME_FORMAT = '%Y-%m-%dT%H:%M'
DEFAULT_LEAD_DAYS = 2

TIMEZONES: List[str] = sorted(pytz.all_timezones)
_KNOWN_TIMEZONES = frozenset(pytz.all_timezones)


@dataclass(frozen=True)
class TargetMoment:
    """Absolute countdown deadline plus the zone the user picked it in."""
    instant: datetime
    timezone: str


def resolve_timezone(name) -> str:
    """Return name if it is a known IANA zone, otherwise UTC."""
    if isinstance(name, str) and name in _KNOWN_TIMEZONES:
        return name
    return DEFAULT_TIMEZONE


def _utc_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(pytz.utc)
    if now.tzinfo is None:
        return pytz.utc.localize(now)
    return now.astimezone(pytz.utc)


def parse_in_timezone(text, zone: str) -> Optional[datetime]:
    """Interpret ``YYYY-MM-DDTHH:mm`` as wall-clock time in zone.

    Returns the instant in UTC, or None when the text does not parse.
    """
    if not isinstance(text, str):
        return None
    tz = pytz.timezone(resolve_timezone(zone))
    try:
        naive = datetime.strptime(text.strip(), FORM_DATETIME_FORMAT)
        return tz.localize(naive).astimezone(pytz.utc)
    except (ValueError, OverflowError):
        logger.debug(f"Unparseable form date '{text}' in {zone}")
        return None


def default_target(zone: str, now: Optional[datetime] = None) -> datetime:
    """Now + 2 days in zone, on the hour."""
    tz = pytz.timezone(resolve_timezone(zone))
    local_now = _utc_now(now).astimezone(tz)
    shifted = tz.normalize(local_now + timedelta(days=DEFAULT_LEAD_DAYS))
    return shifted.replace(minute=0, second=0, microsecond=0).astimezone(pytz.utc)


def resolve_target_moment(text, zone_name, now: Optional[datetime] = None) -> TargetMoment:
    zone = resolve_timezone(zone_name)
    instant = parse_in_timezone(text, zone) if text else None
    if instant is None:
        instant = default_target(zone, now)
    return TargetMoment(instant=instant, timezone=zone)


def format_datetime_local(instant: datetime, zone: str) -> str:
    """Format an instant for a datetime-local input in zone."""
    tz = pytz.timezone(resolve_timezone(zone))
    return instant.astimezone(tz).strftime(FORM_DATETIME_FORMAT)


def to_iso_utc(instant: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2099-01-01T00:00:00.000Z."""
    utc_instant = instant.astimezone(pytz.utc)
    return utc_instant.strftime('%Y-%m-%dT%H:%M:%S.') + f"{utc_instant.microsecond // 1000:03d}Z"


def parse_target_instant(text) -> Optional[datetime]:
    """Parse the ``target`` query parameter; naive timestamps are taken as UTC."""
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        parsed = datetime.fromisoformat(text.strip().replace('Z', '+00:00'))
        if parsed.tzinfo is None:
            parsed = pytz.utc.localize(parsed)
        # offsets near year 1 or 9999 can push the UTC instant out of range
        return parsed.astimezone(pytz.utc)
    except (ValueError, OverflowError) as parse_err:
        logger.debug(f"Invalid target '{text}': {parse_err}")
        return None


def seconds_remaining(target: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole seconds until target, floored at zero; no target means zero."""
    if target is None:
        return 0
    delta = target - _utc_now(now)
    return max(0, math.floor(delta.total_seconds()))
