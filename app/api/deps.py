"""
API Dependencies
Common dependencies for FastAPI routes (sessions and AI clients live on app.state).
"""

from fastapi import Depends, Request

from app.core.config import get_settings
from app.models.fields import BioField
from app.models.session import CharacterSession, SessionRegistry
from app.services.orchestrator import GenerationOrchestrator


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> CharacterSession:
    """Resolve the path's session, 404 via SessionNotFound otherwise."""
    return registry.get(session_id)


def get_text_client(request: Request):
    return request.app.state.text_client


def get_image_client(request: Request):
    return request.app.state.image_client


def get_orchestrator(
    session: CharacterSession = Depends(get_session),
    text_client=Depends(get_text_client),
    image_client=Depends(get_image_client),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        session,
        text_client=text_client,
        image_client=image_client,
        reference_file_ids=get_settings().BIO_REFERENCE_FILE_IDS,
    )


def get_field(field: str) -> BioField:
    """Resolve the path's bio field, 404 via UnknownField otherwise."""
    return BioField.coerce(field)
