"""
Tests for weekly recurrence expansion
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from timetable.domain.errors import ValidationError
from timetable.domain.recurrence import (
    EventTemplate, count_weekdays_between, expand_weekly, parse_weekdays, sunday_index,
)

MSK = ZoneInfo("Europe/Moscow")
BERLIN = ZoneInfo("Europe/Berlin")

SUN, MON, TUE, WED, THU, FRI, SAT = range(7)


@pytest.fixture
def template():
    return EventTemplate(
        title="Algebra",
        description="Chapter 4",
        location="Room 12",
        color="#3B82F6",
        subject_id="a" * 32,
    )


# --- Weekday index ---

def test_sunday_index_is_sunday_first():
    assert sunday_index(date(2024, 1, 7)) == SUN
    assert sunday_index(date(2024, 1, 1)) == MON
    assert sunday_index(date(2024, 1, 6)) == SAT


def test_parse_weekdays_accepts_ints_and_codes():
    assert parse_weekdays([1, "we", "FR", "0"]) == {MON, WED, FRI, SUN}


@pytest.mark.parametrize("bad", [7, -1, "XX", True])
def test_parse_weekdays_rejects_out_of_range(bad):
    with pytest.raises(ValidationError):
        parse_weekdays([bad])


# --- Expansion ---

def test_mon_wed_two_weeks(template):
    """Monday 2024-01-01 09:00, 60 min, Mon+Wed until Jan 15 -> 5 occurrences."""
    start = datetime(2024, 1, 1, 9, 0, tzinfo=MSK)
    occs = expand_weekly(start, 60, {MON, WED}, date(2024, 1, 15), template)

    assert [o.start.date() for o in occs] == [
        date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 8),
        date(2024, 1, 10), date(2024, 1, 15),
    ]
    for o in occs:
        assert (o.start.hour, o.start.minute) == (9, 0)
        assert (o.end.hour, o.end.minute) == (10, 0)


def test_occurrences_share_template_fields(template):
    start = datetime(2024, 1, 1, 9, 0, tzinfo=MSK)
    occs = expand_weekly(start, 45, {TUE}, date(2024, 1, 31), template)

    assert len(occs) == 5
    for o in occs:
        assert o.title == "Algebra"
        assert o.description == "Chapter 4"
        assert o.location == "Room 12"
        assert o.color == "#3B82F6"
        assert o.subject_id == "a" * 32
        assert o.all_day is False


def test_seconds_are_dropped(template):
    start = datetime(2024, 1, 1, 9, 30, 45, 123000, tzinfo=MSK)
    occs = expand_weekly(start, 30, {MON}, date(2024, 1, 8), template)
    assert all(o.start.second == 0 and o.start.microsecond == 0 for o in occs)
    assert occs[0].start == datetime(2024, 1, 1, 9, 30, tzinfo=MSK)


def test_until_date_is_inclusive(template):
    start = datetime(2024, 1, 1, 18, 0, tzinfo=MSK)
    occs = expand_weekly(start, 60, {MON}, date(2024, 1, 8), template)
    assert [o.start.date() for o in occs] == [date(2024, 1, 1), date(2024, 1, 8)]


def test_start_day_not_selected(template):
    """Start on Monday, only Sundays selected: first occurrence is the next Sunday."""
    start = datetime(2024, 1, 1, 10, 0, tzinfo=MSK)
    occs = expand_weekly(start, 60, {SUN}, date(2024, 1, 14), template)
    assert [o.start.date() for o in occs] == [date(2024, 1, 7), date(2024, 1, 14)]


def test_same_day_range(template):
    start = datetime(2024, 1, 3, 10, 0, tzinfo=MSK)
    assert len(expand_weekly(start, 60, {WED}, date(2024, 1, 3), template)) == 1
    assert expand_weekly(start, 60, {THU}, date(2024, 1, 3), template) == []


@pytest.mark.parametrize("start_day,until,weekdays", [
    (date(2024, 1, 1), date(2024, 1, 15), {MON, WED}),
    (date(2024, 2, 1), date(2024, 3, 31), {SAT, SUN}),
    (date(2024, 12, 30), date(2025, 1, 5), {SUN, MON, TUE, WED, THU, FRI, SAT}),
    (date(2024, 5, 17), date(2024, 8, 2), {FRI}),
])
def test_count_and_range_properties(template, start_day, until, weekdays):
    start = datetime(start_day.year, start_day.month, start_day.day, 8, 15, tzinfo=MSK)
    occs = expand_weekly(start, 90, weekdays, until, template)

    assert len(occs) == count_weekdays_between(start_day, until, weekdays)
    for o in occs:
        assert sunday_index(o.start.date()) in weekdays
        assert start_day <= o.start.date() <= until
        assert o.end - o.start == timedelta(minutes=90)
    assert [o.start for o in occs] == sorted(o.start for o in occs)


def test_dst_transition_keeps_wall_clock(template):
    """Berlin springs forward on 2024-03-31: 09:00 local every day, duration intact."""
    start = datetime(2024, 3, 30, 9, 0, tzinfo=BERLIN)
    occs = expand_weekly(start, 60, set(range(7)), date(2024, 4, 1), template)

    assert [o.start.hour for o in occs] == [9, 9, 9]
    assert occs[0].start.utcoffset() == timedelta(hours=1)
    assert occs[2].start.utcoffset() == timedelta(hours=2)
    for o in occs:
        assert o.end - o.start == timedelta(minutes=60)


def test_start_inside_dst_gap_keeps_duration(template):
    """02:30 does not exist in Berlin on 2024-03-31; that occurrence starts at 03:30 CEST."""
    start = datetime(2024, 3, 30, 2, 30, tzinfo=BERLIN)
    occs = expand_weekly(start, 60, set(range(7)), date(2024, 4, 1), template)

    assert [o.start.isoformat() for o in occs] == [
        "2024-03-30T02:30:00+01:00",
        "2024-03-31T03:30:00+02:00",
        "2024-04-01T02:30:00+02:00",
    ]
    for o in occs:
        elapsed = o.end.astimezone(timezone.utc) - o.start.astimezone(timezone.utc)
        assert elapsed == timedelta(minutes=60)


# --- Rejected input ---

def test_empty_weekdays_rejected(template):
    start = datetime(2024, 1, 1, 9, 0, tzinfo=MSK)
    with pytest.raises(ValidationError, match="at least one day"):
        expand_weekly(start, 60, set(), date(2024, 1, 15), template)


def test_until_before_start_rejected(template):
    start = datetime(2024, 1, 10, 9, 0, tzinfo=MSK)
    with pytest.raises(ValidationError, match="Recurrence end date"):
        expand_weekly(start, 60, {MON}, date(2024, 1, 9), template)


@pytest.mark.parametrize("duration", [0, -15])
def test_non_positive_duration_rejected(template, duration):
    start = datetime(2024, 1, 1, 9, 0, tzinfo=MSK)
    with pytest.raises(ValidationError, match="Duration"):
        expand_weekly(start, duration, {MON}, date(2024, 1, 15), template)


def test_count_weekdays_between_empty_range():
    assert count_weekdays_between(date(2024, 1, 2), date(2024, 1, 1), {MON}) == 0
