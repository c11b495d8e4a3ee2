"""
Timestamp normalization for status feeds.

Statuses carry created_at in a fixed textual format, e.g.
``Wed Aug 27 13:08:45 +0000 2008``. parse_timestamp() turns that into an
aware UTC datetime, which is the only value merge decisions compare.

format_relative() renders an instant for display ("about 5 minutes ago",
"yesterday at 13:08", ...).
"""

import re
from datetime import datetime, timedelta, timezone

from statusfeed.timeline.errors import MalformedTimestamp

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_TIMESTAMP_RE = re.compile(
    r"(?P<weekday>[A-Za-z]{3}) "
    r"(?P<month>[A-Za-z]{3}) "
    r"(?P<day>\d{1,2}) "
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}) "
    r"(?P<sign>[+-])(?P<off_hours>\d{2})(?P<off_minutes>\d{2}) "
    r"(?P<year>\d{4})",
    re.ASCII,
)

# Ages past this skip the relative buckets entirely
MAX_RELATIVE_AGE = timedelta(days=12)


def parse_timestamp(raw: str) -> datetime:
    """
    Parse a wire-format status timestamp into an aware UTC datetime.

    Args:
        raw: Timestamp string such as "Wed Aug 27 13:08:45 +0000 2008"

    Returns:
        Timezone-aware datetime normalized to UTC

    Raises:
        MalformedTimestamp: If the string does not match the format, the
            month is unknown, or the calendar values are out of range
    """
    if not isinstance(raw, str):
        raise MalformedTimestamp(repr(raw), "not a string")

    match = _TIMESTAMP_RE.fullmatch(raw)
    if match is None:
        raise MalformedTimestamp(raw)

    month = MONTHS.get(match["month"].lower())
    if month is None:
        raise MalformedTimestamp(raw, f"unknown month {match['month']!r}")

    offset = timedelta(
        hours=int(match["off_hours"]),
        minutes=int(match["off_minutes"]),
    )
    if match["sign"] == "-":
        offset = -offset

    try:
        local = datetime(
            int(match["year"]),
            month,
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"]),
            tzinfo=timezone(offset),
        )
    except ValueError as e:
        raise MalformedTimestamp(raw, str(e)) from e

    return local.astimezone(timezone.utc)


def _clock(instant: datetime, clock_24h: bool) -> str:
    if clock_24h:
        return instant.strftime("%H:%M")
    hour = instant.hour % 12 or 12
    return f"{hour}:{instant.minute:02d} {'AM' if instant.hour < 12 else 'PM'}"


def format_absolute(instant: datetime, clock_24h: bool = True) -> str:
    """Format an instant as e.g. "Aug 27, 2008 at 13:08"."""
    return f"{instant.strftime('%b')} {instant.day}, {instant.year} at {_clock(instant, clock_24h)}"


def format_relative(
    instant: datetime,
    now: datetime | None = None,
    clock_24h: bool = True,
) -> str:
    """
    Describe an instant relative to now.

    Buckets:
        < 1 minute        "just now"
        < 2 minutes       "about a minute ago"
        < 1 hour          "about N minutes ago"
        < 2 hours         "about an hour ago"
        < 6 hours         "about N hours ago"
        same day          "today at HH:MM"
        previous day      "yesterday at HH:MM"
        < 7 days          "last <Weekday> at HH:MM"
        otherwise         absolute date and time

    Future instants and instants older than 12 days are always absolute.
    Calendar days are evaluated in now's timezone.

    Args:
        instant: Aware datetime to describe
        now: Reference time (defaults to the current local time)
        clock_24h: Render times as 24-hour "HH:MM" rather than "h:MM AM"

    Returns:
        Human-readable description
    """
    if now is None:
        now = datetime.now(timezone.utc).astimezone()

    local = instant.astimezone(now.tzinfo)
    age = now - instant
    seconds = age.total_seconds()

    if seconds < 0 or age > MAX_RELATIVE_AGE:
        return format_absolute(local, clock_24h)

    if seconds < 60:
        return "just now"
    if seconds < 120:
        return "about a minute ago"
    if seconds < 3600:
        return f"about {int(seconds // 60)} minutes ago"
    if seconds < 7200:
        return "about an hour ago"
    if seconds < 6 * 3600:
        return f"about {int(seconds // 3600)} hours ago"

    days_back = (now.date() - local.date()).days
    clock = _clock(local, clock_24h)

    if days_back == 0:
        return f"today at {clock}"
    if days_back == 1:
        return f"yesterday at {clock}"
    if days_back < 7:
        return f"last {local.strftime('%A')} at {clock}"

    return format_absolute(local, clock_24h)
