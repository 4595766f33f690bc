"""
Generation API Routes
Bio generation, its progress, and portrait generation/refinement.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from app.api.deps import get_orchestrator, get_session
from app.models.fields import BioField
from app.models.session import CharacterSession, Portrait
from app.schemas.generate import BioGenerateResponse, BioStatusResponse, ImageResponse
from app.schemas.session import FieldState
from app.services.image_utils import detect_image_mime
from app.services.orchestrator import GenerationOrchestrator
from app.services.progress import snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


def _image_response(session: CharacterSession, portrait: Portrait) -> ImageResponse:
    return ImageResponse(
        session_id=session.id,
        mime_type=portrait.mime_type,
        size_bytes=len(portrait.data),
        created_at=portrait.created_at,
        image_url=f"/api/v1/sessions/{session.id}/image",
    )


@router.post("/{session_id}/bio/generate", response_model=BioGenerateResponse)
async def generate_bio(orchestrator: GenerationOrchestrator = Depends(get_orchestrator)):
    """
    Generate the whole character bio from the current sheet and bio values.

    Blocks until the model answers (research calls can take many minutes);
    poll /bio/status from another request for progress.
    """
    result = await orchestrator.generate_bio()
    session = orchestrator.session
    return BioGenerateResponse(
        session_id=session.id,
        updated_fields=result.updated_fields,
        versions_added=result.versions_added,
        fields=[FieldState.from_session(session, f) for f in BioField],
    )


@router.get("/{session_id}/bio/status", response_model=BioStatusResponse)
async def bio_status(session: CharacterSession = Depends(get_session)):
    progress = snapshot(session.bio_started_at)
    return BioStatusResponse(
        in_progress=progress.in_progress,
        message=progress.message,
        percent=progress.percent,
        elapsed_seconds=progress.elapsed_seconds,
        elapsed_display=progress.elapsed_display,
        bio_generated=session.bio_generated,
    )


@router.post("/{session_id}/image/generate", response_model=ImageResponse)
async def generate_image(orchestrator: GenerationOrchestrator = Depends(get_orchestrator)):
    """Generate a portrait from the sheet and appearance."""
    portrait = await orchestrator.generate_image()
    return _image_response(orchestrator.session, portrait)


@router.post("/{session_id}/image/refine", response_model=ImageResponse)
async def refine_image(
    instructions: str = Form(""),
    reference: Optional[UploadFile] = File(None),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Regenerate the portrait with extra instructions and/or a reference image."""
    reference_image = None
    reference_mime = None
    if reference is not None:
        reference_image = await reference.read()
        if reference_image:
            reference_mime = reference.content_type or detect_image_mime(reference_image)
            if not reference_mime.startswith("image/"):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Reference must be an image file",
                )
            logger.info(f"[Refine] Reference image: {reference.filename} ({len(reference_image)} bytes)")

    portrait = await orchestrator.refine_image(instructions, reference_image, reference_mime)
    return _image_response(orchestrator.session, portrait)


@router.get("/{session_id}/image")
async def read_image(session: CharacterSession = Depends(get_session)):
    """Serve the current portrait bytes."""
    if session.portrait is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No portrait generated yet",
        )
    return Response(
        content=session.portrait.data,
        media_type=session.portrait.mime_type,
        headers={"Cache-Control": "no-store"},
    )
