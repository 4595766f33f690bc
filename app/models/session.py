"""
Character Session
Everything one open character form owns for its lifetime: sheet values, bio
values and their visual state, version history, the portrait, and the
per-operation latches.
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, Mapping, Optional

from app.core.errors import GenerationInProgress, SessionNotFound, UnknownField
from app.models.fields import SHEET_FIELDS, Alignment, BioField, toggle_alignment
from app.models.history import (
    FieldHistoryStore, Version, VersionNavigator, VisualState, on_direct_edit, visual_state_for,
)

logger = logging.getLogger(__name__)

BIO_OPERATION = "bio"
IMAGE_OPERATION = "image"


@dataclass
class Portrait:
    """Current portrait image."""
    data: bytes
    mime_type: str = "image/png"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class CharacterSession:
    """State of one character form."""

    def __init__(self, session_id: str = None):
        self.id = session_id or f"sess_{uuid.uuid4().hex[:12]}"
        self.created_at = datetime.now(timezone.utc)
        self.sheet: Dict[str, str] = {key: "" for key in SHEET_FIELDS}
        self.bio: Dict[BioField, str] = {f: "" for f in BioField}
        self.visual: Dict[BioField, VisualState] = {f: VisualState.NEUTRAL for f in BioField}
        self.history = FieldHistoryStore()
        self.navigator = VersionNavigator(self.history)
        self.portrait: Optional[Portrait] = None
        self.bio_generated = False
        self.bio_started_at: Optional[datetime] = None
        self._latches: Dict[str, bool] = {BIO_OPERATION: False, IMAGE_OPERATION: False}

    # -- form values ---------------------------------------------------

    def update_sheet(self, values: Mapping[str, Optional[str]]) -> None:
        unknown = [k for k in values if k not in self.sheet]
        if unknown:
            raise UnknownField(", ".join(unknown))
        for key, value in values.items():
            self.sheet[key] = "" if value is None else str(value)

    def select_alignment(self, chosen) -> str:
        """Alignment grid click. Returns the stored alignment ("" when cleared)."""
        selected = toggle_alignment(self.sheet["alignment"], Alignment(chosen))
        self.sheet["alignment"] = selected.value if selected else ""
        return self.sheet["alignment"]

    def edit_field(self, field, value: str) -> VisualState:
        """Direct user edit: new display value, neutral visual state, no version."""
        key = BioField.coerce(field)
        if self.is_busy(BIO_OPERATION):
            raise GenerationInProgress(BIO_OPERATION)
        self.bio[key] = value
        self.visual[key] = on_direct_edit(key)
        return self.visual[key]

    def navigate(self, field, direction: str) -> Optional[Version]:
        """
        Step a field's history ("previous" or "next") and show the reached version.

        Returns None, leaving value and visual state untouched, when the move
        is not allowed.
        """
        key = BioField.coerce(field)
        if direction not in ("previous", "next"):
            raise ValueError(f"Unknown direction: {direction}")
        if self.is_busy(BIO_OPERATION):
            raise GenerationInProgress(BIO_OPERATION)

        if direction == "previous":
            version = self.navigator.go_previous(key)
        else:
            version = self.navigator.go_next(key)
        if version is not None:
            self.bio[key] = version.value
            self.visual[key] = visual_state_for(version)
        return version

    def form_data(self) -> Dict[str, str]:
        """Flat snapshot of every sheet and bio value, keyed by wire name."""
        data = dict(self.sheet)
        data.update({f.value: v for f, v in self.bio.items()})
        return data

    # -- latches -------------------------------------------------------

    def is_busy(self, operation: str) -> bool:
        return self._latches[operation]

    @contextmanager
    def latch(self, operation: str) -> Iterator[None]:
        """Hold the operation latch; a second holder is refused, never queued."""
        if self._latches[operation]:
            raise GenerationInProgress(operation)
        self._latches[operation] = True
        try:
            yield
        finally:
            self._latches[operation] = False


class SessionRegistry:
    """In-memory sessions keyed by id. Lives as long as the process."""

    def __init__(self):
        self._sessions: Dict[str, CharacterSession] = {}

    def create(self) -> CharacterSession:
        session = CharacterSession()
        self._sessions[session.id] = session
        logger.info(f"[Sessions] Created {session.id} ({len(self._sessions)} active)")
        return session

    def get(self, session_id: str) -> CharacterSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(f"Session {session_id} not found") from None

    def delete(self, session_id: str) -> None:
        self.get(session_id)
        del self._sessions[session_id]
        logger.info(f"[Sessions] Ended {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)
