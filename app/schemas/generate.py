"""
Generate Schemas
Pydantic models for bio and portrait generation responses.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from app.models.fields import BioField
from app.schemas.session import FieldState


class BioGenerateResponse(BaseModel):
    """Result of a successful bio generation."""
    session_id: str
    updated_fields: List[BioField]
    versions_added: int
    fields: List[FieldState] = []
    message: str = "Character bio generated successfully!"


class BioStatusResponse(BaseModel):
    """Simulated progress of an in-flight bio generation."""
    in_progress: bool
    message: str = ""
    percent: float = 0.0
    elapsed_seconds: int = 0
    elapsed_display: str = ""
    bio_generated: bool = False


class ImageResponse(BaseModel):
    """Portrait metadata; the bytes are served by GET /sessions/{id}/image."""
    session_id: str
    mime_type: str
    size_bytes: int
    created_at: datetime
    image_url: Optional[str] = None
    message: str = "Character image generated successfully!"
