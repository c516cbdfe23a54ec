"""
Event API endpoints
"""
import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from timetable.api.deps import get_db, require_user
from timetable.config import get_settings
from timetable.application.events import (
    DEFAULT_DURATION_MINUTES, DEFAULT_END_TIME, DEFAULT_START_TIME,
    DeleteEventUseCase, EventFormData, PurgeOldEventsUseCase, SaveEventUseCase,
    list_events,
)
from timetable.application.subjects import list_subjects
from timetable.application.visibility import CalendarViewState, filter_visible_events
from timetable.api.v1.subjects import SubjectResponse
from timetable.domain.event import Event, is_hex_color


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/events", tags=["events"], dependencies=[Depends(require_user)])


# === Request/Response models ===

class SaveEventRequest(BaseModel):
    title: str = ""
    description: str | None = None
    start_date: date
    end_date: date | None = None
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME
    all_day: bool = False
    location: str | None = None
    color: str | None = None  # ignored when a subject resolves, kept for old clients
    subject_id: str | None = None
    is_recurring: bool = False
    weekdays: list[int | str] = []  # 0=Sunday .. 6=Saturday, or "MO", "TU", ...
    recurrence_end_date: date | None = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        if v is not None and not is_hex_color(v):
            raise ValueError(f"color must be a hex RGB string, got: {v}")
        return v

    def to_form(self, event_id: str | None = None) -> EventFormData:
        return EventFormData(
            id=event_id,
            title=self.title,
            description=self.description,
            start_date=self.start_date,
            end_date=self.end_date,
            start_time=self.start_time,
            end_time=self.end_time,
            all_day=self.all_day,
            location=self.location,
            color=self.color,
            subject_id=self.subject_id,
            is_recurring=self.is_recurring,
            weekdays=list(self.weekdays),
            recurrence_end_date=self.recurrence_end_date,
            duration_minutes=self.duration_minutes,
        )


class EventResponse(BaseModel):
    id: str
    title: str
    description: str | None
    start: datetime
    end: datetime
    all_day: bool
    location: str | None
    color: str | None
    subject_id: str | None

    @classmethod
    def from_event(cls, ev: Event) -> "EventResponse":
        return cls(
            id=ev.id,
            title=ev.title,
            description=ev.description,
            start=ev.start,
            end=ev.end,
            all_day=ev.all_day,
            location=ev.location,
            color=ev.color,
            subject_id=ev.subject_id,
        )


class SaveEventResponse(BaseModel):
    events: list[EventResponse]
    count: int
    subject: SubjectResponse
    subject_created: bool


class CleanupResponse(BaseModel):
    success: bool
    deleted_count: int
    message: str


# === Endpoints ===

@router.get("", response_model=list[EventResponse])
def get_events(db: Session = Depends(get_db)):
    """All events ordered by start"""
    return [EventResponse.from_event(e) for e in list_events(db)]


@router.get("/visible", response_model=list[EventResponse])
def get_visible_events(
    db: Session = Depends(get_db),
    color: list[str] | None = Query(default=None),
):
    """
    Events to render. Without `color` parameters the colors of active
    subjects are used; colorless events are always included.
    """
    events = list_events(db)
    if color is None:
        view = CalendarViewState()
        view.set_subjects(list_subjects(db))
        visible = view.visible(events)
    else:
        visible = filter_visible_events(events, color)
    return [EventResponse.from_event(e) for e in visible]


@router.post("", response_model=SaveEventResponse, status_code=201)
def create_event(req: SaveEventRequest, db: Session = Depends(get_db)):
    """Create one event, or a batch of occurrences for a recurring save"""
    result = SaveEventUseCase(db).execute(req.to_form())
    if result.subject_created:
        logger.info("Created fallback subject %r (%s)", result.subject.name, result.subject.id)
    logger.info("Saved %d event(s)", len(result.events))
    return SaveEventResponse(
        events=[EventResponse.from_event(e) for e in result.events],
        count=len(result.events),
        subject=SubjectResponse.from_subject(result.subject),
        subject_created=result.subject_created,
    )


@router.put("/{event_id}", response_model=SaveEventResponse)
def update_event(event_id: str, req: SaveEventRequest, db: Session = Depends(get_db)):
    """Replace an event; a recurring request generates new occurrences instead"""
    result = SaveEventUseCase(db).execute(req.to_form(event_id=event_id))
    return SaveEventResponse(
        events=[EventResponse.from_event(e) for e in result.events],
        count=len(result.events),
        subject=SubjectResponse.from_subject(result.subject),
        subject_created=result.subject_created,
    )


@router.delete("/{event_id}")
def delete_event(event_id: str, db: Session = Depends(get_db)):
    logger.info("Deleting event %s", event_id)
    DeleteEventUseCase(db).execute(event_id)
    return {"success": True}


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup_events(db: Session = Depends(get_db)):
    """Delete events that ended more than a day ago"""
    deleted = PurgeOldEventsUseCase(db).execute()
    days = get_settings().PURGE_AFTER_DAYS
    logger.info("Purged %d old event(s)", deleted)
    return CleanupResponse(
        success=True,
        deleted_count=deleted,
        message=f"Deleted {deleted} events that ended more than {days} day(s) ago",
    )
