"""Subject use cases - the subject registry"""
from sqlalchemy.orm import Session

from timetable.config import get_settings
from timetable.domain.event import Subject, SubjectFields, validate_subject_fields
from timetable.infrastructure.stores import SubjectStore


def list_subjects(db: Session, active_only: bool = False) -> list[Subject]:
    subjects = SubjectStore(db).list_all()
    if active_only:
        return [s for s in subjects if s.is_active]
    return subjects


class CreateSubjectUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.store = SubjectStore(db)

    def execute(self, name: str, color: str, is_active: bool = True) -> Subject:
        fields = validate_subject_fields(SubjectFields(name=name, color=color, is_active=is_active))
        return self.store.insert(fields)


class EnsureSubjectUseCase:
    """
    Return the subject named exactly `name`, creating it when missing.

    Idempotent: repeated calls with the same name return the same subject.
    Returns (subject, created).
    """

    def __init__(self, db: Session):
        self.db = db
        self.store = SubjectStore(db)

    def execute(self, name: str, color: str) -> tuple[Subject, bool]:
        # stored names are stripped, so match against the stripped form
        name = (name or "").strip()
        existing = self.store.find_by_name(name) if name else None
        if existing:
            return existing, False
        subject = CreateSubjectUseCase(self.db).execute(name=name, color=color, is_active=True)
        return subject, True


class EnsureOtherSubjectUseCase:
    """Fallback subject for uncategorized events."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self) -> tuple[Subject, bool]:
        settings = get_settings()
        return EnsureSubjectUseCase(self.db).execute(
            name=settings.OTHER_SUBJECT_NAME,
            color=settings.OTHER_SUBJECT_COLOR,
        )


class UpdateSubjectUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.store = SubjectStore(db)

    def execute(self, subject_id: str, name: str, color: str, is_active: bool) -> Subject:
        # Events keep the color they were saved with; no cascade.
        fields = validate_subject_fields(SubjectFields(name=name, color=color, is_active=is_active))
        return self.store.replace(subject_id, fields)


class DeleteSubjectUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.store = SubjectStore(db)

    def execute(self, subject_id: str) -> None:
        self.store.delete_by_id(subject_id)
