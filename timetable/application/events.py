"""Event use cases - save reconciliation, CRUD, purge"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo

from sqlalchemy.orm import Session

from timetable.config import Settings, get_settings
from timetable.domain.errors import PartialBatchFailureError, ValidationError
from timetable.domain.event import (
    Event, EventFields, Subject, all_day_bounds, check_length, validate_event_fields,
)
from timetable.domain.recurrence import EventTemplate, expand_weekly, parse_weekdays
from timetable.infrastructure.stores import EventStore, SubjectStore
from timetable.application.subjects import EnsureOtherSubjectUseCase, list_subjects
from timetable.application.visibility import CalendarViewState

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "10:00"
DEFAULT_DURATION_MINUTES = 60
ALL_DAY_MINUTES = 24 * 60


@dataclass
class EventFormData:
    """Raw save request as entered in the event dialog."""
    start_date: date
    end_date: date | None = None
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME
    all_day: bool = False
    title: str = ""
    description: str | None = None
    location: str | None = None
    color: str | None = None
    subject_id: str | None = None
    id: str | None = None
    is_recurring: bool = False
    weekdays: list[int | str] = field(default_factory=list)
    recurrence_end_date: date | None = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES


@dataclass
class SaveResult:
    events: list[Event]
    subject: Subject
    subject_created: bool = False

    @property
    def is_batch(self) -> bool:
        return len(self.events) != 1

    @property
    def event(self) -> Event:
        return self.events[0]


def parse_time_of_day(value: str, settings: Settings | None = None) -> time:
    """Parse 'HH:MM' and check the hour against the configured day window."""
    settings = settings or get_settings()
    try:
        hours_str, minutes_str = (value or "").strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
        parsed = time(hours, minutes)
    except ValueError as e:
        raise ValidationError(f"Invalid time: {value!r}, expected HH:MM") from e
    if hours < settings.DAY_START_HOUR or hours > settings.DAY_END_HOUR:
        raise ValidationError(
            f"Selected time must be between {settings.DAY_START_HOUR}:00 and {settings.DAY_END_HOUR}:00"
        )
    return parsed


def compute_event_times(form: EventFormData, tz: tzinfo, settings: Settings | None = None) -> tuple[datetime, datetime]:
    """Effective start/end of the (first) event described by the form."""
    end_date = form.end_date or form.start_date
    if form.all_day:
        return all_day_bounds(form.start_date, end_date, tz)

    start = datetime.combine(form.start_date, parse_time_of_day(form.start_time, settings), tzinfo=tz)
    if form.is_recurring:
        if form.duration_minutes is None or form.duration_minutes <= 0:
            raise ValidationError("Duration must be a positive number of minutes")
        return start, start + timedelta(minutes=form.duration_minutes)

    end = datetime.combine(end_date, parse_time_of_day(form.end_time, settings), tzinfo=tz)
    return start, end


def validate_event_form(form: EventFormData, tz: tzinfo, settings: Settings | None = None) -> tuple[datetime, datetime, set[int]]:
    """
    Run all save checks in order; the first failing rule wins.

    Returns (start, end, weekdays). Nothing is written here.
    """
    check_length((form.title or "").strip(), "Title")
    check_length(form.location, "Location")
    start, end = compute_event_times(form, tz, settings)
    if end < start:
        raise ValidationError("End date cannot be before start date")

    weekdays: set[int] = set()
    if form.is_recurring:
        weekdays = parse_weekdays(form.weekdays or [])
        if not weekdays:
            raise ValidationError("Please select at least one day for recurring events")
        if form.recurrence_end_date is None:
            raise ValidationError("Please select an end date for recurring events")
        if form.recurrence_end_date < form.start_date:
            raise ValidationError("Recurrence end date must be after start date")
    return start, end, weekdays


def resolve_title(title: str | None, subject: Subject | None, placeholder: str) -> str:
    if title and title.strip():
        return title.strip()
    if subject and subject.name:
        return subject.name
    return placeholder


def _as_all_day(occ: EventFields, tz: tzinfo, span: timedelta = timedelta(0)) -> EventFields:
    """Stretch an occurrence over whole local days; `span` is end_date - start_date of the form."""
    day = occ.start.date()
    start, end = all_day_bounds(day, day + span, tz)
    return occ.with_changes(all_day=True, start=start, end=end)


def list_events(db: Session) -> list[Event]:
    return EventStore(db).list_all()


# ============================================================================
# Event CRUD
# ============================================================================

class CreateEventUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.store = EventStore(db)

    def execute(self, fields: EventFields) -> Event:
        validate_event_fields(fields)
        return self.store.insert(fields)


class UpdateEventUseCase:
    """Full replace of an existing event's fields (no merging)."""

    def __init__(self, db: Session):
        self.db = db
        self.store = EventStore(db)

    def execute(self, event_id: str, fields: EventFields) -> Event:
        validate_event_fields(fields)
        return self.store.replace(event_id, fields)


class DeleteEventUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.store = EventStore(db)

    def execute(self, event_id: str) -> None:
        self.store.delete_by_id(event_id)


class PurgeOldEventsUseCase:
    """Delete events that ended more than PURGE_AFTER_DAYS ago. Returns count."""

    def __init__(self, db: Session):
        self.db = db
        self.store = EventStore(db)

    def execute(self, now: datetime | None = None) -> int:
        settings = get_settings()
        now = now or datetime.now(self.store.tz)
        cutoff = now - timedelta(days=settings.PURGE_AFTER_DAYS)
        return self.store.delete_where_end_before(cutoff)


# ============================================================================
# Save reconciliation
# ============================================================================

class SaveEventUseCase:
    """
    Validate a save request, resolve its subject and color, then write.

    Single save: blank id creates, non-blank id replaces.
    Recurring save: expands into independent occurrences and creates each one;
    an id on the form is ignored (occurrences carry no series link).
    """

    def __init__(self, db: Session, view_state: CalendarViewState | None = None):
        self.db = db
        self.view_state = view_state
        self.settings = get_settings()
        self.event_store = EventStore(db)
        self.subject_store = SubjectStore(db)

    def execute(self, form: EventFormData) -> SaveResult:
        tz = self.event_store.tz
        start, end, weekdays = validate_event_form(form, tz, self.settings)

        event_id = (form.id or "").strip() or None
        if event_id and not form.is_recurring:
            self.event_store.get(event_id)

        # Subject must exist before any event references it
        subject, created = self._resolve_subject(form.subject_id)
        if created and self.view_state is not None:
            self.view_state.set_subjects(list_subjects(self.db))
        title = resolve_title(form.title, subject, self.settings.UNTITLED_EVENT_TITLE)

        if form.is_recurring:
            template = EventTemplate(
                title=title,
                description=form.description,
                location=form.location,
                color=subject.color,
                subject_id=subject.id,
            )
            occurrences = expand_weekly(
                start=start,
                duration_minutes=ALL_DAY_MINUTES if form.all_day else form.duration_minutes,
                weekdays=weekdays,
                until_date=form.recurrence_end_date,
                template=template,
            )
            if form.all_day:
                span = (form.end_date or form.start_date) - form.start_date
                occurrences = [_as_all_day(occ, tz, span) for occ in occurrences]
            events = self._create_batch(occurrences)
            return SaveResult(events=events, subject=subject, subject_created=created)

        fields = EventFields(
            title=title,
            start=start,
            end=end,
            all_day=form.all_day,
            description=form.description,
            location=form.location,
            color=subject.color,
            subject_id=subject.id,
        )
        if event_id:
            event = UpdateEventUseCase(self.db).execute(event_id, fields)
        else:
            event = CreateEventUseCase(self.db).execute(fields)
        return SaveResult(events=[event], subject=subject, subject_created=created)

    def _resolve_subject(self, subject_id: str | None) -> tuple[Subject, bool]:
        subject_id = (subject_id or "").strip()
        if subject_id:
            # Registry color is authoritative over whatever the form carried
            return self.subject_store.get(subject_id), False
        return EnsureOtherSubjectUseCase(self.db).execute()

    def _create_batch(self, occurrences: list[EventFields]) -> list[Event]:
        """Sequential independent writes; already persisted occurrences stay."""
        create = CreateEventUseCase(self.db)
        created: list[Event] = []
        for occ in occurrences:
            try:
                created.append(create.execute(occ))
            except Exception as exc:
                if not created:
                    raise
                raise PartialBatchFailureError(created, len(occurrences)) from exc
        return created
