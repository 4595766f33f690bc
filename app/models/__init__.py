# Domain models package - fields, version history, sessions
from app.models.fields import BioField, Alignment, SHEET_FIELDS, toggle_alignment
from app.models.history import (
    Provenance, VisualState, Version, FieldHistoryStore, VersionNavigator,
    on_direct_edit, visual_state_for,
)
from app.models.session import CharacterSession, SessionRegistry, Portrait

__all__ = [
    "BioField",
    "Alignment",
    "SHEET_FIELDS",
    "toggle_alignment",
    "Provenance",
    "VisualState",
    "Version",
    "FieldHistoryStore",
    "VersionNavigator",
    "on_direct_edit",
    "visual_state_for",
    "CharacterSession",
    "SessionRegistry",
    "Portrait",
]
