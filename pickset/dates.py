"""Calendar boundaries, durations and timestamp formats over epoch seconds.

Every function that accepts a ``gmt`` flag reads calendar fields and renders
its result in the same zone: GMT when ``gmt`` is true, otherwise the host's
configured local zone. Omitted epochs default to the current time.
"""

import re
import time
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from pickset.exceptions import TimestampParseError
from pickset.util import DAY, HOUR, MINUTE

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_GMT = ZoneInfo("GMT")

# English abbreviations, indexed by datetime.weekday() and month - 1
_DAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTH_ABBR = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
_MONTH_NUMBERS = {name: number for number, name in enumerate(_MONTH_ABBR, start=1)}

# Apache/NCSA access log timestamp, e.g. "19/May/2014:17:30:56 -0500"
_LOG_TIMESTAMP = re.compile(
    r"^\[?(\d{1,2})/([A-Za-z]{3})/(\d{4}):(\d{1,2}):(\d{1,2}):(\d{1,2})"
    r" ([+-])(\d{2})(\d{2})\]?$"
)


@dataclass(frozen=True, kw_only=True)
class Dayparts:
    """A non-negative duration split into days, hours, minutes and seconds."""

    days: int
    hours: int
    minutes: int
    seconds: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)

    def __str__(self) -> str:
        """Non-zero units only, e.g. "6d 3h 19m 5s"; empty for a zero duration."""
        parts = (
            (self.days, "d"),
            (self.hours, "h"),
            (self.minutes, "m"),
            (self.seconds, "s"),
        )
        return " ".join(f"{value}{suffix}" for value, suffix in parts if value > 0)


def _now() -> float:
    """Read the ambient clock. Tests replace this to pin "now"."""
    return time.time()


def _resolve(epoch: int | None) -> int:
    return int(_now()) if epoch is None else epoch


def _to_datetime(epoch: float, gmt: bool) -> datetime:
    # Offsetting from the epoch keeps pre-1970 values portable
    moment = _EPOCH + timedelta(seconds=epoch)
    # astimezone() without a zone asks localtime(), which knows the zone history
    return moment.astimezone(_GMT) if gmt else moment.astimezone()


def _midnight(day: date, gmt: bool) -> int:
    """Epoch of 00:00:00 on ``day``, constructed in the selected zone."""
    if gmt:
        return int(datetime(day.year, day.month, day.day, tzinfo=_GMT).timestamp())
    return int(time.mktime((day.year, day.month, day.day, 0, 0, 0, 0, 0, -1)))


def log_timestamp_to_epoch(text: str) -> int:
    """
    Convert an access log timestamp into its epoch.

    Args:
        text: Timestamp like "19/May/2014:17:30:56 -0500". Surrounding
            square brackets, as written in the log line, are accepted.

    Returns:
        The UTC epoch of the timestamp, honoring its numeric offset

    Raises:
        TimestampParseError: If the text does not match the layout or names
            an impossible date

    Example:
        >>> log_timestamp_to_epoch("19/May/2014:17:30:56 -0500")
        1400538656
    """
    match = _LOG_TIMESTAMP.match(text.strip())
    if match is None:
        raise TimestampParseError(
            f"Not an access log timestamp: {text!r}\n"
            f"Expected layout: dd/Mon/yyyy:HH:MM:SS +ZZZZ, "
            f"e.g. '19/May/2014:17:30:56 -0500'"
        )

    day, month_name, year, hour, minute, second, sign, off_hours, off_minutes = (
        match.groups()
    )
    month = _MONTH_NUMBERS.get(month_name.title())
    if month is None:
        valid = ", ".join(_MONTH_ABBR)
        raise TimestampParseError(
            f"Unknown month '{month_name}' in {text!r}. Valid months: {valid}"
        )

    offset = timedelta(hours=int(off_hours), minutes=int(off_minutes))
    if sign == "-":
        offset = -offset

    try:
        parsed = datetime(
            int(year),
            month,
            int(day),
            int(hour),
            int(minute),
            int(second),
            tzinfo=timezone(offset),
        )
    except ValueError as e:
        raise TimestampParseError(f"Invalid timestamp {text!r}: {e}") from e

    return int(parsed.timestamp())


def epoch_to_cookie(epoch: int) -> str:
    """
    Return a Set-Cookie expiry timestamp (RFC 6265) for ``epoch``.

    The result is always in GMT, e.g. "Mon, 19 May 2014 22:30:56 GMT".
    """
    dt = _to_datetime(epoch, gmt=True)
    return (
        f"{_DAY_ABBR[dt.weekday()]}, {dt.day:02d} {_MONTH_ABBR[dt.month - 1]} "
        f"{dt.year:04d} {dt:%H:%M:%S} GMT"
    )


def epoch_to_rfc822(epoch: int | None = None, gmt: bool = False) -> str:
    """
    Return an RFC 822 datetime, e.g. "Wed, 03 Feb 16 21:50:28 -0600".

    Args:
        epoch: Epoch to format (defaults to now)
        gmt: Use GMT instead of the host's local zone

    Returns:
        Datetime with a two-digit year and numeric offset
    """
    dt = _to_datetime(_resolve(epoch), gmt)
    return (
        f"{_DAY_ABBR[dt.weekday()]}, {dt.day:02d} {_MONTH_ABBR[dt.month - 1]} "
        f"{dt.year % 100:02d} {dt:%H:%M:%S} {dt:%z}"
    )


def epoch_to_rfc3339(epoch: int | None = None, gmt: bool = False) -> str:
    """
    Return an RFC 3339 datetime, e.g. "2012-06-16T13:20:19-05:00".

    GMT mode renders the offset as "+00:00".
    """
    return _to_datetime(_resolve(epoch), gmt).isoformat(timespec="seconds")


def first_second_of_day(epoch: int | None = None, gmt: bool = False) -> int:
    """
    Return the epoch of 00:00:00 on the day containing ``epoch``.

    Args:
        epoch: Any moment within the day (defaults to now)
        gmt: Use GMT instead of the host's local zone

    Returns:
        Epoch timestamp of the start of that day

    Note:
        In local mode, a midnight that falls inside a DST gap is resolved
        the way the host's local-time construction resolves it.
    """
    return _midnight(_to_datetime(_resolve(epoch), gmt).date(), gmt)


def first_second_of_month(epoch: int | None = None, gmt: bool = False) -> int:
    """Return the epoch of 00:00:00 on the first day of the month containing ``epoch``."""
    day = _to_datetime(_resolve(epoch), gmt).date()
    return _midnight(day.replace(day=1), gmt)


def first_second_of_year(epoch: int | None = None, gmt: bool = False) -> int:
    """Return the epoch of 00:00:00 on January 1 of the year containing ``epoch``."""
    day = _to_datetime(_resolve(epoch), gmt).date()
    return _midnight(date(day.year, 1, 1), gmt)


def first_second_of_week_monday(epoch: int | None = None, gmt: bool = False) -> int:
    """
    Return the epoch of 00:00:00 on the Monday on or before ``epoch``.

    Weekdays are numbered the ISO way (Monday=1 ... Sunday=7). If ``epoch``
    falls on a Monday, the start of that same day is returned.

    Example:
        >>> # Wednesday 2025-01-08 15:00 UTC -> Monday 2025-01-06 00:00 UTC
        >>> first_second_of_week_monday(1736348400, gmt=True)
        1736121600
    """
    day = _to_datetime(_resolve(epoch), gmt).date()
    return _midnight(day - timedelta(days=day.isoweekday() - 1), gmt)


def first_second_of_week_sunday(epoch: int | None = None, gmt: bool = False) -> int:
    """
    Return the epoch of 00:00:00 on the Sunday on or before ``epoch``.

    Weekdays are numbered Sunday=0 ... Saturday=6. If ``epoch`` falls on a
    Sunday, the start of that same day is returned.
    """
    day = _to_datetime(_resolve(epoch), gmt).date()
    return _midnight(day - timedelta(days=day.isoweekday() % 7), gmt)


def seconds_to_dayparts(seconds: int) -> Dayparts:
    """
    Split a number of seconds into days, hours, minutes and seconds.

    The sign is discarded, so -100 and 100 give the same result.

    Example:
        >>> seconds_to_dayparts(530345)
        Dayparts(days=6, hours=3, minutes=19, seconds=5)
    """
    seconds = int(abs(seconds))
    return Dayparts(
        days=seconds // DAY,
        hours=seconds % DAY // HOUR,
        minutes=seconds % HOUR // MINUTE,
        seconds=seconds % MINUTE,
    )


def seconds_to_dayparts_string(seconds: int) -> str:
    """
    Render a number of seconds like "6d 3h 19m 5s".

    Zero-valued units are omitted, so a zero duration renders as "".
    """
    return str(seconds_to_dayparts(seconds))


def stamp(gmt: bool = False, fmt: str | None = None) -> str:
    """
    Format the current moment.

    Args:
        gmt: Use GMT instead of the host's local zone
        fmt: strftime pattern. The default renders millisecond precision
            and the zone abbreviation, e.g. "2016-02-03,00:27:31.596 CST"

    Returns:
        Formatted timestamp string
    """
    now = _to_datetime(_now(), gmt)
    if fmt is not None:
        return now.strftime(fmt)
    return f"{now:%Y-%m-%d,%H:%M:%S}.{now.microsecond // 1000:03d} {now.tzname()}"
