"""
Event and Subject stores (SQLAlchemy)

Identifiers are opaque 32-char hex strings generated here. Callers never
build or parse them; validity is checked before every lookup so a malformed
identifier is reported as InvalidIdentifierError, never as NotFoundError.
"""
import logging
import re
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone, tzinfo

from sqlalchemy.exc import OperationalError, InterfaceError
from sqlalchemy.orm import Session

from timetable.config import get_settings
from timetable.domain.errors import (
    DependencyUnavailableError, InvalidIdentifierError, NotFoundError,
)
from timetable.domain.event import Event, EventFields, Subject, SubjectFields
from timetable.infrastructure.db.models import EventModel, SubjectModel

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[0-9a-f]{32}$")


def new_identifier() -> str:
    return uuid.uuid4().hex


def check_identifier(identifier: str) -> str:
    if not isinstance(identifier, str) or not IDENTIFIER_RE.match(identifier):
        raise InvalidIdentifierError(str(identifier))
    return identifier


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class _BaseStore:
    def __init__(self, db: Session, tz: tzinfo | None = None):
        self.db = db
        self.tz = tz or get_settings().get_timezone()

    @contextmanager
    def _guard(self, action: str):
        """Translate connectivity failures into DependencyUnavailableError."""
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            self.db.rollback()
            logger.error("Store unavailable during %s: %s", action, exc)
            raise DependencyUnavailableError(f"Database unavailable during {action}") from exc

    def _to_db(self, value: datetime) -> datetime:
        """Aware -> naive UTC. Naive input is read as local wall-clock time."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.tz)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def _from_db(self, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc).astimezone(self.tz)


class EventStore(_BaseStore):
    def _to_event(self, row: EventModel) -> Event:
        return Event(
            id=row.id,
            title=row.title,
            description=row.description,
            start=self._from_db(row.start),
            end=self._from_db(row.end),
            all_day=row.all_day,
            location=row.location,
            color=row.color,
            subject_id=row.subject_id,
            created_at=self._from_db(row.created_at),
            updated_at=self._from_db(row.updated_at),
        )

    def _apply(self, row: EventModel, fields: EventFields) -> None:
        row.title = fields.title
        row.description = fields.description
        row.start = self._to_db(fields.start)
        row.end = self._to_db(fields.end)
        row.all_day = fields.all_day
        row.location = fields.location
        row.color = fields.color
        row.subject_id = fields.subject_id

    def _get_row(self, event_id: str) -> EventModel:
        check_identifier(event_id)
        row = self.db.get(EventModel, event_id)
        if row is None:
            raise NotFoundError("Event", event_id)
        return row

    def list_all(self) -> list[Event]:
        with self._guard("list events"):
            rows = self.db.query(EventModel).order_by(EventModel.start.asc(), EventModel.id.asc()).all()
            return [self._to_event(r) for r in rows]

    def get(self, event_id: str) -> Event:
        with self._guard("get event"):
            return self._to_event(self._get_row(event_id))

    def insert(self, fields: EventFields) -> Event:
        with self._guard("insert event"):
            now = _utcnow()
            row = EventModel(id=new_identifier(), created_at=now, updated_at=now)
            self._apply(row, fields)
            self.db.add(row)
            self.db.commit()
            return self._to_event(row)

    def replace(self, event_id: str, fields: EventFields) -> Event:
        """Overwrite every mutable field of an existing event."""
        with self._guard("replace event"):
            row = self._get_row(event_id)
            self._apply(row, fields)
            row.updated_at = _utcnow()
            self.db.commit()
            return self._to_event(row)

    def delete_by_id(self, event_id: str) -> None:
        with self._guard("delete event"):
            check_identifier(event_id)
            deleted = self.db.query(EventModel).filter(
                EventModel.id == event_id,
            ).delete(synchronize_session=False)
            if deleted == 0:
                self.db.rollback()
                raise NotFoundError("Event", event_id)
            self.db.commit()

    def delete_where_end_before(self, cutoff: datetime) -> int:
        with self._guard("purge events"):
            deleted = self.db.query(EventModel).filter(
                EventModel.end < self._to_db(cutoff),
            ).delete(synchronize_session=False)
            self.db.commit()
            return deleted


class SubjectStore(_BaseStore):
    @staticmethod
    def _to_subject(row: SubjectModel) -> Subject:
        return Subject(id=row.id, name=row.name, color=row.color, is_active=row.is_active)

    def _get_row(self, subject_id: str) -> SubjectModel:
        check_identifier(subject_id)
        row = self.db.get(SubjectModel, subject_id)
        if row is None:
            raise NotFoundError("Subject", subject_id)
        return row

    def list_all(self) -> list[Subject]:
        with self._guard("list subjects"):
            rows = self.db.query(SubjectModel).order_by(
                SubjectModel.created_at.asc(), SubjectModel.name.asc(),
            ).all()
            return [self._to_subject(r) for r in rows]

    def get(self, subject_id: str) -> Subject:
        with self._guard("get subject"):
            return self._to_subject(self._get_row(subject_id))

    def find_by_name(self, name: str) -> Subject | None:
        with self._guard("find subject"):
            row = self.db.query(SubjectModel).filter(
                SubjectModel.name == name,
            ).order_by(SubjectModel.created_at.asc()).first()
            return self._to_subject(row) if row else None

    def insert(self, fields: SubjectFields) -> Subject:
        with self._guard("insert subject"):
            now = _utcnow()
            row = SubjectModel(
                id=new_identifier(),
                name=fields.name,
                color=fields.color,
                is_active=fields.is_active,
                created_at=now,
                updated_at=now,
            )
            self.db.add(row)
            self.db.commit()
            return self._to_subject(row)

    def replace(self, subject_id: str, fields: SubjectFields) -> Subject:
        with self._guard("replace subject"):
            row = self._get_row(subject_id)
            row.name = fields.name
            row.color = fields.color
            row.is_active = fields.is_active
            row.updated_at = _utcnow()
            self.db.commit()
            return self._to_subject(row)

    def delete_by_id(self, subject_id: str) -> None:
        with self._guard("delete subject"):
            check_identifier(subject_id)
            deleted = self.db.query(SubjectModel).filter(
                SubjectModel.id == subject_id,
            ).delete(synchronize_session=False)
            if deleted == 0:
                self.db.rollback()
                raise NotFoundError("Subject", subject_id)
            self.db.commit()
