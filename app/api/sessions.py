"""
Session API Routes
Character sessions, sheet values, alignment, and per-field bio editing and history.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, status

from app.api.deps import get_field, get_registry, get_session
from app.core.errors import UnknownField
from app.models.fields import SHEET_FIELDS, BioField
from app.models.session import CharacterSession, SessionRegistry
from app.schemas.session import (
    AlignmentResponse,
    AlignmentSelect,
    FieldEdit,
    FieldHistoryResponse,
    FieldState,
    SessionCreate,
    SessionResponse,
    SheetUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    initial: Optional[SessionCreate] = None,
    registry: SessionRegistry = Depends(get_registry),
):
    """Open a new character form, blank unless starting values are given."""
    if initial is not None:
        # Nothing is registered unless every key is known
        unknown = [key for key in initial.sheet if key not in SHEET_FIELDS]
        if unknown:
            raise UnknownField(", ".join(unknown))
        for key in initial.bio:
            BioField.coerce(key)
    session = registry.create()
    if initial is not None:
        session.update_sheet(initial.sheet)
        for key, value in initial.bio.items():
            session.edit_field(key, value)
    logger.info(f"[Session] Created {session.id}")
    return SessionResponse.from_session(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def read_session(session: CharacterSession = Depends(get_session)):
    return SessionResponse.from_session(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Discard the session with its history and portrait."""
    registry.delete(session_id)
    logger.info(f"[Session] Deleted {session_id}")


@router.patch("/{session_id}/sheet", response_model=SessionResponse)
async def update_sheet(update: SheetUpdate, session: CharacterSession = Depends(get_session)):
    session.update_sheet(update.values)
    return SessionResponse.from_session(session)


@router.post("/{session_id}/alignment", response_model=AlignmentResponse)
async def select_alignment(selection: AlignmentSelect, session: CharacterSession = Depends(get_session)):
    """Clicking the selected tile clears the alignment."""
    return AlignmentResponse(alignment=session.select_alignment(selection.alignment))


@router.get("/{session_id}/fields/{field}", response_model=FieldState)
async def read_field(field: BioField = Depends(get_field), session: CharacterSession = Depends(get_session)):
    return FieldState.from_session(session, field)


@router.put("/{session_id}/fields/{field}", response_model=FieldState)
async def edit_field(
    edit: FieldEdit,
    field: BioField = Depends(get_field),
    session: CharacterSession = Depends(get_session),
):
    """Direct user edit. Clears the AI highlight; does not create a version."""
    session.edit_field(field, edit.value)
    return FieldState.from_session(session, field)


@router.get("/{session_id}/fields/{field}/history", response_model=FieldHistoryResponse)
async def read_field_history(field: BioField = Depends(get_field), session: CharacterSession = Depends(get_session)):
    return FieldHistoryResponse.from_versions(
        field,
        session.history.cursor(field),
        list(session.history.history(field)),
    )


@router.post("/{session_id}/fields/{field}/previous", response_model=FieldState)
async def previous_version(field: BioField = Depends(get_field), session: CharacterSession = Depends(get_session)):
    """Step back one version. At the first version this is a no-op."""
    session.navigate(field, "previous")
    return FieldState.from_session(session, field)


@router.post("/{session_id}/fields/{field}/next", response_model=FieldState)
async def next_version(field: BioField = Depends(get_field), session: CharacterSession = Depends(get_session)):
    """Step forward one version. At the latest version this is a no-op."""
    session.navigate(field, "next")
    return FieldState.from_session(session, field)
