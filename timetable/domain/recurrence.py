"""
Weekly recurrence expansion.

Weekday indices are Sunday-first: 0=Sunday .. 6=Saturday.
Occurrences keep the local wall-clock time of `start`. A start time that
does not exist locally (spring-forward gap) is moved to the first real
instant after it. The end is `duration_minutes` of elapsed time later, so
stored occurrences never collapse to zero length on a DST transition day.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Set

from timetable.domain.errors import ValidationError
from timetable.domain.event import EventFields


WEEKDAY_NAMES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")
WEEKDAY_MAP = {name: idx for idx, name in enumerate(WEEKDAY_NAMES)}


@dataclass(frozen=True)
class EventTemplate:
    """Fields shared by every occurrence of one expansion."""
    title: str
    description: str | None = None
    location: str | None = None
    color: str | None = None
    subject_id: str | None = None


@dataclass(frozen=True)
class WeeklyRule:
    start: datetime
    duration_minutes: int
    weekdays: frozenset[int]
    until_date: date


def sunday_index(d: date) -> int:
    """date.weekday() is Monday-first; convert to 0=Sunday."""
    return (d.weekday() + 1) % 7


def parse_weekdays(values: Iterable[int | str]) -> Set[int]:
    """Accept ints (0..6) or two-letter codes ('MO', 'we')."""
    out: Set[int] = set()
    for value in values:
        if isinstance(value, str):
            code = value.strip().upper()
            if code in WEEKDAY_MAP:
                out.add(WEEKDAY_MAP[code])
                continue
            if not code.isdigit():
                raise ValidationError(f"Invalid weekday: {value!r}")
            value = int(code)
        if isinstance(value, bool) or not 0 <= value <= 6:
            raise ValidationError(f"Weekday must be between 0 (Sunday) and 6 (Saturday), got: {value!r}")
        out.add(value)
    return out


def _validate_rule(rule: WeeklyRule) -> None:
    if not rule.weekdays:
        raise ValidationError("Please select at least one day for recurring events")
    for wd in rule.weekdays:
        if not 0 <= wd <= 6:
            raise ValidationError(f"Weekday must be between 0 (Sunday) and 6 (Saturday), got: {wd}")
    if rule.duration_minutes <= 0:
        raise ValidationError("Duration must be a positive number of minutes")
    if rule.until_date < rule.start.date():
        raise ValidationError("Recurrence end date must be after start date")


def occurrence_dates(rule: WeeklyRule) -> list[date]:
    """Days in [start.date(), until_date] whose weekday is selected, ascending."""
    _validate_rule(rule)
    out: list[date] = []
    d = rule.start.date()
    while d <= rule.until_date:
        if sunday_index(d) in rule.weekdays:
            out.append(d)
        d += timedelta(days=1)
    return out


def count_weekdays_between(start_date: date, until_date: date, weekdays: Iterable[int]) -> int:
    """Closed-form count of selected weekdays in the inclusive range."""
    if until_date < start_date:
        return 0
    selected = set(weekdays)
    total_days = (until_date - start_date).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * len(selected)
    first = sunday_index(start_date)
    for offset in range(remainder):
        if (first + offset) % 7 in selected:
            count += 1
    return count


def _normalize(value: datetime) -> datetime:
    """Round-trip through UTC so a wall time inside a DST gap becomes a real instant."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).astimezone(value.tzinfo)


def _add_elapsed(value: datetime, minutes: int) -> datetime:
    if value.tzinfo is None:
        return value + timedelta(minutes=minutes)
    return (value.astimezone(timezone.utc) + timedelta(minutes=minutes)).astimezone(value.tzinfo)


def expand_weekly(
    start: datetime,
    duration_minutes: int,
    weekdays: Iterable[int],
    until_date: date,
    template: EventTemplate,
) -> list[EventFields]:
    """Expand a weekly recurrence into concrete event field sets (no ids)."""
    rule = WeeklyRule(
        start=start,
        duration_minutes=duration_minutes,
        weekdays=frozenset(weekdays),
        until_date=until_date,
    )
    occurrences: list[EventFields] = []
    for d in occurrence_dates(rule):
        wall = start.replace(
            year=d.year, month=d.month, day=d.day, second=0, microsecond=0, fold=0,
        )
        occ_start = _normalize(wall)
        occ_end = _add_elapsed(occ_start, duration_minutes)
        occurrences.append(EventFields(
            title=template.title,
            start=occ_start,
            end=occ_end,
            all_day=False,
            description=template.description,
            location=template.location,
            color=template.color,
            subject_id=template.subject_id,
        ))
    return occurrences
