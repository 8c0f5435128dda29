"""Tests for calendar boundaries, durations and timestamp formats."""

import time
from datetime import datetime, timezone

import pytest

import pickset.dates
from pickset import (
    DAY,
    HOUR,
    Dayparts,
    TimestampParseError,
    epoch_to_cookie,
    epoch_to_rfc822,
    epoch_to_rfc3339,
    first_second_of_day,
    first_second_of_month,
    first_second_of_week_monday,
    first_second_of_week_sunday,
    first_second_of_year,
    log_timestamp_to_epoch,
    seconds_to_dayparts,
    seconds_to_dayparts_string,
    stamp,
)

# Monday 2014-05-19 17:30:56 CDT / 22:30:56 UTC
LOG_EPOCH = 1400538656


def utc(*args: int) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


@pytest.fixture
def host_zone(monkeypatch: pytest.MonkeyPatch):
    """Set the host zone by name; the original zone is restored afterwards."""

    def set_zone(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield set_zone
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def chicago(host_zone):
    """Run the test with the host zone set to America/Chicago."""
    host_zone("America/Chicago")


@pytest.fixture
def frozen_now(monkeypatch: pytest.MonkeyPatch):
    """Pin the ambient clock to a quarter second past LOG_EPOCH."""
    monkeypatch.setattr(pickset.dates, "_now", lambda: LOG_EPOCH + 0.25)


def test_log_timestamp_honors_offset():
    """Test that the numeric offset is applied, not the host zone."""
    assert log_timestamp_to_epoch("19/May/2014:17:30:56 -0500") == LOG_EPOCH
    assert log_timestamp_to_epoch("01/Jan/2000:05:30:00 +0530") == utc(2000, 1, 1)


def test_log_timestamp_accepts_brackets_and_case():
    """Test the bracketed form written in log lines and lowercase months."""
    assert log_timestamp_to_epoch("[19/May/2014:17:30:56 -0500]") == LOG_EPOCH
    assert log_timestamp_to_epoch("19/may/2014:17:30:56 -0500") == LOG_EPOCH


@pytest.mark.parametrize(
    "text",
    [
        "not-a-date",
        "",
        "19/Foo/2014:17:30:56 -0500",
        "31/Feb/2014:00:00:00 +0000",
        "19/May/2014 17:30:56 -0500",
        "19/May/2014:17:30:56",
    ],
)
def test_log_timestamp_rejects_malformed_text(text: str):
    """Test that malformed text raises instead of returning an epoch."""
    with pytest.raises(TimestampParseError):
        log_timestamp_to_epoch(text)


def test_timestamp_parse_error_is_value_error():
    """Test that callers can catch parse failures as ValueError."""
    with pytest.raises(ValueError):
        log_timestamp_to_epoch("not-a-date")


def test_epoch_to_cookie():
    """Test cookie expiry formatting, always in GMT."""
    assert epoch_to_cookie(0) == "Thu, 01 Jan 1970 00:00:00 GMT"
    assert epoch_to_cookie(LOG_EPOCH) == "Mon, 19 May 2014 22:30:56 GMT"
    assert epoch_to_cookie(-DAY) == "Wed, 31 Dec 1969 00:00:00 GMT"


def test_epoch_to_cookie_ignores_host_zone(chicago):
    """Test that the cookie format does not follow the local zone."""
    assert epoch_to_cookie(LOG_EPOCH) == "Mon, 19 May 2014 22:30:56 GMT"


def test_epoch_to_rfc822(chicago):
    """Test RFC 822 output in local and GMT modes."""
    assert epoch_to_rfc822(LOG_EPOCH) == "Mon, 19 May 14 17:30:56 -0500"
    assert epoch_to_rfc822(LOG_EPOCH, gmt=True) == "Mon, 19 May 14 22:30:56 +0000"
    # Standard time in January
    assert epoch_to_rfc822(utc(2016, 2, 4, 3, 50, 28)) == (
        "Wed, 03 Feb 16 21:50:28 -0600"
    )


def test_epoch_to_rfc3339(chicago):
    """Test RFC 3339 output in local and GMT modes."""
    assert epoch_to_rfc3339(LOG_EPOCH) == "2014-05-19T17:30:56-05:00"
    assert epoch_to_rfc3339(LOG_EPOCH, gmt=True) == "2014-05-19T22:30:56+00:00"


def test_formatters_default_to_now(frozen_now):
    """Test that an omitted epoch means the current moment."""
    assert epoch_to_rfc3339(gmt=True) == "2014-05-19T22:30:56+00:00"
    assert epoch_to_rfc822(gmt=True) == "Mon, 19 May 14 22:30:56 +0000"


def test_first_second_of_day_gmt():
    """Test day boundaries in GMT mode."""
    assert first_second_of_day(LOG_EPOCH, gmt=True) == utc(2014, 5, 19)
    assert first_second_of_day(utc(2014, 5, 19), gmt=True) == utc(2014, 5, 19)
    assert first_second_of_day(-1, gmt=True) == -DAY


def test_first_second_of_day_local(chicago):
    """Test that local mode uses the local calendar day."""
    # 2014-05-20 00:00 UTC is still 2014-05-19 in Chicago
    assert first_second_of_day(utc(2014, 5, 20)) == utc(2014, 5, 19, 5)
    assert first_second_of_day(LOG_EPOCH) == utc(2014, 5, 19, 5)


def test_gmt_mode_reads_gmt_calendar_fields(chicago):
    """Test that GMT mode never mixes in the local calendar day."""
    assert first_second_of_day(utc(2014, 5, 20), gmt=True) == utc(2014, 5, 20)
    assert first_second_of_month(utc(2014, 6, 1, 2), gmt=True) == utc(2014, 6, 1)
    assert first_second_of_year(utc(2015, 1, 1, 2), gmt=True) == utc(2015, 1, 1)


def test_first_second_of_day_is_idempotent(chicago):
    """Test that a day boundary maps to itself in both modes."""
    for epoch in range(0, 3 * 365 * DAY, 7919 * 13):
        for gmt in (True, False):
            start = first_second_of_day(epoch, gmt=gmt)
            assert start <= epoch
            assert first_second_of_day(start, gmt=gmt) == start


def test_first_second_of_day_defaults_to_now(frozen_now):
    """Test that an omitted epoch means today."""
    assert first_second_of_day(gmt=True) == utc(2014, 5, 19)


def test_first_second_of_month(chicago):
    """Test month boundaries in both modes."""
    assert first_second_of_month(LOG_EPOCH, gmt=True) == utc(2014, 5, 1)
    # May 1 00:00 CDT
    assert first_second_of_month(LOG_EPOCH) == utc(2014, 5, 1, 5)
    # March 1 00:00 CST, before the DST change
    assert first_second_of_month(utc(2014, 3, 20)) == utc(2014, 3, 1, 6)


def test_first_second_of_year_is_constant_within_year(chicago):
    """Test that every moment in a year shares one year boundary."""
    gmt_start = utc(2014, 1, 1)
    local_start = utc(2014, 1, 1, 6)
    for epoch in range(local_start, utc(2015, 1, 1), 5 * DAY + 12345):
        assert first_second_of_year(epoch, gmt=True) == gmt_start
        assert first_second_of_year(epoch) == local_start


def test_first_second_of_week_monday():
    """Test Monday week starts in GMT mode."""
    monday = utc(2025, 1, 6)
    assert first_second_of_week_monday(utc(2025, 1, 8, 15), gmt=True) == monday
    assert first_second_of_week_monday(utc(2025, 1, 12, 23, 59, 59), gmt=True) == (
        monday
    )
    assert first_second_of_week_monday(monday, gmt=True) == monday


@pytest.mark.parametrize("gmt", [True, False])
@pytest.mark.parametrize(
    "week_start, weekday",
    [(first_second_of_week_monday, 0), (first_second_of_week_sunday, 6)],
)
def test_week_start_bounds(chicago, week_start, weekday: int, gmt: bool):
    """Test that week starts are midnights on the right weekday, under a week back."""
    zone = timezone.utc if gmt else None
    for epoch in range(-30 * DAY, 400 * DAY, 3 * HOUR + 17):
        start = week_start(epoch, gmt=gmt)
        assert start <= epoch
        if gmt:
            assert epoch - start < 7 * DAY
        else:
            # A week containing the fall-back change is an hour longer
            assert epoch - start < 7 * DAY + HOUR
        moment = datetime.fromtimestamp(start, tz=zone)
        assert moment.weekday() == weekday
        assert (moment.hour, moment.minute, moment.second) == (0, 0, 0)
        reached = datetime.fromtimestamp(epoch, tz=zone).date()
        assert (reached - moment.date()).days < 7
        assert week_start(start, gmt=gmt) == start


def test_first_second_of_week_monday_local(chicago):
    """Test that a local Monday midnight is its own week start."""
    monday = utc(2014, 5, 19, 5)
    assert first_second_of_week_monday(monday) == monday
    assert first_second_of_week_monday(LOG_EPOCH) == monday
    # Sunday 23:00 local still belongs to the week that began on the 12th
    assert first_second_of_week_monday(utc(2014, 5, 19, 4)) == utc(2014, 5, 12, 5)


def test_first_second_of_week_sunday():
    """Test Sunday week starts in GMT mode."""
    sunday = utc(2025, 1, 5)
    assert first_second_of_week_sunday(utc(2025, 1, 8, 15), gmt=True) == sunday
    assert first_second_of_week_sunday(sunday, gmt=True) == sunday
    assert first_second_of_week_sunday(utc(2025, 1, 11, 23), gmt=True) == sunday


def test_week_start_across_dst_change(chicago):
    """Test week starts when the week contains the spring DST change."""
    # DST began Sunday 2014-03-09 at 02:00 local
    saturday = utc(2014, 3, 15, 5, 30)  # 00:30 CDT
    assert first_second_of_week_sunday(saturday) == utc(2014, 3, 9, 6)
    assert first_second_of_week_monday(saturday) == utc(2014, 3, 10, 5)


def test_local_mode_applies_historic_offsets(host_zone):
    """Test a date when Moscow kept UTC+4 all year."""
    host_zone("Europe/Moscow")
    noon = utc(2012, 6, 1, 12)

    assert epoch_to_rfc3339(noon) == "2012-06-01T16:00:00+04:00"
    assert epoch_to_rfc822(noon) == "Fri, 01 Jun 12 16:00:00 +0400"
    assert first_second_of_day(noon) == utc(2012, 5, 31, 20)
    assert first_second_of_month(noon) == utc(2012, 5, 31, 20)
    assert first_second_of_year(noon) == utc(2011, 12, 31, 20)
    # Sunday 2012-05-27 and Monday 2012-05-28, both at 00:00 MSK
    assert first_second_of_week_sunday(noon) == utc(2012, 5, 26, 20)
    assert first_second_of_week_monday(noon) == utc(2012, 5, 27, 20)


def test_seconds_to_dayparts():
    """Test duration decomposition."""
    assert seconds_to_dayparts(530345) == Dayparts(
        days=6, hours=3, minutes=19, seconds=5
    )
    assert seconds_to_dayparts(0) == Dayparts(days=0, hours=0, minutes=0, seconds=0)
    assert seconds_to_dayparts(86399).as_dict() == {
        "days": 0,
        "hours": 23,
        "minutes": 59,
        "seconds": 59,
    }


def test_seconds_to_dayparts_discards_sign():
    """Test that negative durations decompose like positive ones."""
    assert seconds_to_dayparts(-100) == seconds_to_dayparts(100)
    assert seconds_to_dayparts(-530345) == seconds_to_dayparts(530345)


def test_seconds_to_dayparts_recombines():
    """Test that the parts add back up and stay within their ranges."""
    for total in [*range(0, 2 * DAY, 997), 10**9 + 7]:
        parts = seconds_to_dayparts(total)
        assert (
            parts.days * 86400 + parts.hours * 3600 + parts.minutes * 60 + parts.seconds
            == total
        )
        assert parts.hours < 24
        assert parts.minutes < 60
        assert parts.seconds < 60


def test_seconds_to_dayparts_string():
    """Test that only non-zero units are rendered."""
    assert seconds_to_dayparts_string(530345) == "6d 3h 19m 5s"
    assert seconds_to_dayparts_string(3600) == "1h"
    assert seconds_to_dayparts_string(86401) == "1d 1s"
    assert seconds_to_dayparts_string(-59) == "59s"


def test_seconds_to_dayparts_string_zero_is_empty():
    """Test that a zero duration renders as an empty string."""
    assert seconds_to_dayparts_string(0) == ""


def test_stamp_default_format(frozen_now, chicago):
    """Test millisecond precision and the zone abbreviation."""
    assert stamp(gmt=True) == "2014-05-19,22:30:56.250 GMT"
    assert stamp() == "2014-05-19,17:30:56.250 CDT"


def test_stamp_custom_format(frozen_now):
    """Test a caller-supplied strftime pattern."""
    assert stamp(gmt=True, fmt="%Y/%m/%d %H") == "2014/05/19 22"
