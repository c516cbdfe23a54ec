"""
Subject API endpoints
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from timetable.api.deps import get_db, require_user
from timetable.application.subjects import (
    CreateSubjectUseCase, DeleteSubjectUseCase, EnsureSubjectUseCase,
    UpdateSubjectUseCase, list_subjects,
)
from timetable.config import get_settings
from timetable.domain.event import Subject, is_hex_color


router = APIRouter(prefix="/api/v1/subjects", tags=["subjects"], dependencies=[Depends(require_user)])


# === Request/Response models ===

class SubjectRequest(BaseModel):
    name: str
    color: str
    is_active: bool = True

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not is_hex_color(v):
            raise ValueError(f"color must be a hex RGB string, got: {v}")
        return v


class EnsureSubjectRequest(BaseModel):
    name: str
    color: str | None = None  # used only when the subject has to be created


class SubjectResponse(BaseModel):
    id: str
    name: str
    color: str
    is_active: bool

    @classmethod
    def from_subject(cls, s: Subject) -> "SubjectResponse":
        return cls(id=s.id, name=s.name, color=s.color, is_active=s.is_active)


class EnsureSubjectResponse(SubjectResponse):
    created: bool


# === Endpoints ===

@router.get("", response_model=list[SubjectResponse])
def get_subjects(db: Session = Depends(get_db), active_only: bool = False):
    return [SubjectResponse.from_subject(s) for s in list_subjects(db, active_only=active_only)]


@router.post("", response_model=SubjectResponse, status_code=201)
def create_subject(req: SubjectRequest, db: Session = Depends(get_db)):
    subject = CreateSubjectUseCase(db).execute(name=req.name, color=req.color, is_active=req.is_active)
    return SubjectResponse.from_subject(subject)


@router.post("/ensure", response_model=EnsureSubjectResponse)
def ensure_subject(req: EnsureSubjectRequest, db: Session = Depends(get_db)):
    """Return the subject with this exact name, creating it if missing"""
    color = req.color or get_settings().OTHER_SUBJECT_COLOR
    subject, created = EnsureSubjectUseCase(db).execute(name=req.name, color=color)
    return EnsureSubjectResponse(
        id=subject.id,
        name=subject.name,
        color=subject.color,
        is_active=subject.is_active,
        created=created,
    )


@router.put("/{subject_id}", response_model=SubjectResponse)
def update_subject(subject_id: str, req: SubjectRequest, db: Session = Depends(get_db)):
    subject = UpdateSubjectUseCase(db).execute(
        subject_id=subject_id, name=req.name, color=req.color, is_active=req.is_active,
    )
    return SubjectResponse.from_subject(subject)


@router.delete("/{subject_id}")
def delete_subject(subject_id: str, db: Session = Depends(get_db)):
    """Remove the subject; events that reference it are left as they are"""
    DeleteSubjectUseCase(db).execute(subject_id)
    return {"success": True}
