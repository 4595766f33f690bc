"""
Export API Routes
Bio download as PDF, with a printable HTML document when the PDF cannot be built.
"""

import logging
from urllib.parse import quote
from fastapi import APIRouter, Depends, Response
from fastapi.responses import HTMLResponse

from app.api.deps import get_session
from app.models.session import CharacterSession
from app.services.export import build_pdf, build_print_document, export_filename

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{session_id}/export")
async def export_bio(session: CharacterSession = Depends(get_session)):
    values = session.form_data()
    try:
        pdf = build_pdf(values, session.portrait)
    except Exception as e:
        logger.error(f"[Export] Error generating PDF: {e}", exc_info=True)
        return HTMLResponse(build_print_document(values, session.portrait))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(export_filename(values))}"},
    )
