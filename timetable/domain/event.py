"""Calendar event and subject value objects"""
import re
from dataclasses import dataclass, asdict, replace
from datetime import date, datetime, time, tzinfo
from typing import Any, Dict

from timetable.domain.errors import ValidationError

HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

ALL_DAY_START = time(0, 0, 0, 0)
ALL_DAY_END = time(23, 59, 59, 999000)

# Matches the String(255) columns of title, location and subject name
MAX_TEXT_LENGTH = 255


@dataclass(frozen=True)
class EventFields:
    """Mutable part of an event: everything except identifier and timestamps."""
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    description: str | None = None
    location: str | None = None
    color: str | None = None
    subject_id: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_changes(self, **changes) -> "EventFields":
        return replace(self, **changes)


@dataclass(frozen=True)
class Event:
    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    description: str | None = None
    location: str | None = None
    color: str | None = None
    subject_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_fields(cls, event_id: str, fields: EventFields, **timestamps) -> "Event":
        return cls(id=event_id, **fields.to_dict(), **timestamps)

    def fields(self) -> EventFields:
        return EventFields(
            title=self.title,
            start=self.start,
            end=self.end,
            all_day=self.all_day,
            description=self.description,
            location=self.location,
            color=self.color,
            subject_id=self.subject_id,
        )


@dataclass(frozen=True)
class SubjectFields:
    name: str
    color: str
    is_active: bool = True


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    color: str
    is_active: bool = True

    def fields(self) -> SubjectFields:
        return SubjectFields(name=self.name, color=self.color, is_active=self.is_active)


def is_hex_color(value: str | None) -> bool:
    return bool(value) and HEX_COLOR_RE.match(value) is not None


def validate_color(value: str) -> str:
    if not is_hex_color(value):
        raise ValidationError(f"Color must be a hex RGB string like #A855F7, got: {value!r}")
    return value


def all_day_bounds(start_date: date, end_date: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Local-day boundaries: start_date 00:00:00.000 .. end_date 23:59:59.999."""
    return (
        datetime.combine(start_date, ALL_DAY_START, tzinfo=tz),
        datetime.combine(end_date, ALL_DAY_END, tzinfo=tz),
    )


def check_length(value: str | None, label: str) -> None:
    if value is not None and len(value) > MAX_TEXT_LENGTH:
        raise ValidationError(f"{label} must be at most {MAX_TEXT_LENGTH} characters")


def validate_event_fields(fields: EventFields) -> None:
    """Invariants every stored event satisfies."""
    if not fields.title or not fields.title.strip():
        raise ValidationError("Title cannot be empty")
    check_length(fields.title, "Title")
    check_length(fields.location, "Location")
    if fields.end < fields.start:
        raise ValidationError("End date cannot be before start date")
    if fields.color is not None:
        validate_color(fields.color)


def validate_subject_fields(fields: SubjectFields) -> SubjectFields:
    name = (fields.name or "").strip()
    if not name:
        raise ValidationError("Subject name cannot be empty")
    check_length(name, "Subject name")
    validate_color(fields.color)
    return replace(fields, name=name)
