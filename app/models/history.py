"""
Field Version History
Per-field append-only version log with a cursor, and prev/next navigation over it.

    history:  [ v1 (blank/user) ][ v2 (ai) ][ v3 (user) ][ v4 (ai) ]
    cursor:                                               ^
    counter:  "4/4"  - navigation shown only when there are 2+ versions

A direct user edit never appends; it is captured as the "original value" the
next time the AI writes that field.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.errors import UnknownField, VersionNotFound
from app.models.fields import BioField

logger = logging.getLogger(__name__)


class Provenance(str, Enum):
    """Where a version's value came from."""
    BLANK = "blank"
    USER_EDITED = "user"
    AI_GENERATED = "ai"


class VisualState(str, Enum):
    """Display state of a field; values double as the frontend CSS class."""
    HIGHLIGHTED = "ai-generated"
    NEUTRAL = "user-edited"


@dataclass(frozen=True)
class Version:
    """Immutable snapshot of a field value."""
    value: str
    provenance: Provenance
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def provenance_for(original_value: str) -> Provenance:
    return Provenance.BLANK if original_value.strip() == "" else Provenance.USER_EDITED


def visual_state_for(version: Version) -> VisualState:
    if version.provenance is Provenance.AI_GENERATED:
        return VisualState.HIGHLIGHTED
    return VisualState.NEUTRAL


def on_direct_edit(field: BioField) -> VisualState:
    """Visual transition for a user typing into a field. Does not touch history."""
    BioField.coerce(field)
    return VisualState.NEUTRAL


class FieldHistoryStore:
    """
    Version log and cursor for every declared bio field.

    One instance per character session; nothing here is persisted.
    """

    def __init__(self, fields: Iterable[BioField] = tuple(BioField)):
        self._histories: Dict[BioField, List[Version]] = {f: [] for f in fields}
        self._cursors: Dict[BioField, Optional[int]] = {f: None for f in self._histories}

    def _log(self, field) -> List[Version]:
        key = BioField.coerce(field)
        if key not in self._histories:
            raise UnknownField(field)
        return self._histories[key]

    @property
    def fields(self) -> Tuple[BioField, ...]:
        return tuple(self._histories)

    def record_generation(self, field, original_value: str, ai_value: str) -> int:
        """
        Record an AI write to a field.

        Captures the pre-AI value (first touch, or a direct edit since the last
        version), then the AI value, skipping any append that would repeat the
        previous value. Moves the cursor to the newest version.

        Returns:
            Number of versions appended (0, 1 or 2)
        """
        history = self._log(field)
        key = BioField.coerce(field)
        before = len(history)

        if not history or original_value != history[-1].value:
            history.append(Version(original_value, provenance_for(original_value)))

        if ai_value != history[-1].value:
            history.append(Version(ai_value, Provenance.AI_GENERATED))

        self._cursors[key] = len(history) - 1
        appended = len(history) - before
        logger.debug(f"[History] {key.value}: +{appended} version(s), total={len(history)}")
        return appended

    def current_version(self, field) -> Version:
        history = self._log(field)
        if not history:
            raise VersionNotFound(BioField.coerce(field).value)
        return history[self._cursors[BioField.coerce(field)]]

    def history(self, field) -> Tuple[Version, ...]:
        return tuple(self._log(field))

    def length(self, field) -> int:
        return len(self._log(field))

    def cursor(self, field) -> Optional[int]:
        self._log(field)
        return self._cursors[BioField.coerce(field)]

    def set_cursor(self, field, index: int) -> None:
        history = self._log(field)
        if not 0 <= index < len(history):
            raise IndexError(f"Cursor {index} out of range for {len(history)} version(s)")
        self._cursors[BioField.coerce(field)] = index


class VersionNavigator:
    """Prev/next stepping over a FieldHistoryStore."""

    def __init__(self, store: FieldHistoryStore):
        self.store = store

    def can_go_previous(self, field) -> bool:
        cursor = self.store.cursor(field)
        return self.store.length(field) > 1 and cursor > 0

    def can_go_next(self, field) -> bool:
        cursor = self.store.cursor(field)
        return self.store.length(field) > 1 and cursor < self.store.length(field) - 1

    def is_visible(self, field) -> bool:
        return self.store.length(field) > 1

    def counter(self, field) -> Optional[Tuple[int, int]]:
        """1-indexed (position, total), only when navigation is visible."""
        if not self.is_visible(field):
            return None
        return self.store.cursor(field) + 1, self.store.length(field)

    def go_previous(self, field) -> Optional[Version]:
        if not self.can_go_previous(field):
            return None
        return self._step(field, -1)

    def go_next(self, field) -> Optional[Version]:
        if not self.can_go_next(field):
            return None
        return self._step(field, 1)

    def _step(self, field, delta: int) -> Version:
        self.store.set_cursor(field, self.store.cursor(field) + delta)
        version = self.store.current_version(field)
        position, total = self.counter(field)
        logger.debug(
            f"[History] {BioField.coerce(field).value}: now at {position}/{total} ({version.provenance.value})"
        )
        return version
