"""
Session Schemas
Pydantic models for session, sheet and bio field requests and responses.
"""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from app.models.fields import Alignment, BioField
from app.models.history import Provenance, Version, VisualState
from app.models.session import BIO_OPERATION, IMAGE_OPERATION, CharacterSession


class VersionResponse(BaseModel):
    """One stored version of a bio field."""
    value: str
    provenance: Provenance
    created_at: datetime

    class Config:
        from_attributes = True


class FieldState(BaseModel):
    """What the form shows for one bio field."""
    field: BioField
    label: str
    value: str
    visual_state: VisualState
    history_length: int = 0
    counter: Optional[List[int]] = None  # [position, total], only when navigation is visible
    navigation_visible: bool = False
    can_go_previous: bool = False
    can_go_next: bool = False

    @classmethod
    def from_session(cls, session: CharacterSession, field: BioField) -> "FieldState":
        navigator = session.navigator
        counter = navigator.counter(field)
        return cls(
            field=field,
            label=field.label,
            value=session.bio[field],
            visual_state=session.visual[field],
            history_length=session.history.length(field),
            counter=list(counter) if counter else None,
            navigation_visible=navigator.is_visible(field),
            can_go_previous=navigator.can_go_previous(field),
            can_go_next=navigator.can_go_next(field),
        )


class FieldHistoryResponse(BaseModel):
    """Full version history of one bio field."""
    field: BioField
    cursor: Optional[int]
    versions: List[VersionResponse] = []

    @classmethod
    def from_versions(cls, field: BioField, cursor: Optional[int], versions: List[Version]) -> "FieldHistoryResponse":
        return cls(field=field, cursor=cursor, versions=[VersionResponse.model_validate(v) for v in versions])


class SessionResponse(BaseModel):
    """Schema for session response."""
    id: str
    created_at: datetime
    sheet: Dict[str, str]
    fields: List[FieldState]
    has_portrait: bool = False
    bio_generated: bool = False
    bio_in_progress: bool = False
    image_in_progress: bool = False

    @classmethod
    def from_session(cls, session: CharacterSession) -> "SessionResponse":
        return cls(
            id=session.id,
            created_at=session.created_at,
            sheet=dict(session.sheet),
            fields=[FieldState.from_session(session, f) for f in BioField],
            has_portrait=session.portrait is not None,
            bio_generated=session.bio_generated,
            bio_in_progress=session.is_busy(BIO_OPERATION),
            image_in_progress=session.is_busy(IMAGE_OPERATION),
        )


class SheetUpdate(BaseModel):
    """Partial character sheet update, keyed by sheet field name."""
    values: Dict[str, Optional[str]]


class FieldEdit(BaseModel):
    """Direct user edit of a bio field."""
    value: str


class AlignmentSelect(BaseModel):
    """Alignment grid click."""
    alignment: Alignment


class AlignmentResponse(BaseModel):
    alignment: str


class SessionCreate(BaseModel):
    """Optional starting values for a new session."""
    sheet: Dict[str, Optional[str]] = {}
    bio: Dict[str, str] = {}
