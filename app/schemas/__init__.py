# Pydantic schemas package
from app.schemas.session import (
    VersionResponse, FieldState, FieldHistoryResponse, SessionResponse,
    SheetUpdate, FieldEdit, AlignmentSelect, AlignmentResponse, SessionCreate,
)
from app.schemas.generate import BioGenerateResponse, BioStatusResponse, ImageResponse

__all__ = [
    "VersionResponse", "FieldState", "FieldHistoryResponse", "SessionResponse",
    "SheetUpdate", "FieldEdit", "AlignmentSelect", "AlignmentResponse", "SessionCreate",
    "BioGenerateResponse", "BioStatusResponse", "ImageResponse",
]
