"""
Character Bio Export
Renders the current sheet, bio and portrait as a two-part PDF (sheet first,
bio on a new page). If the PDF cannot be built, callers fall back to a
self-printing HTML document with the same content.
"""

import base64
import html
import io
import logging
from datetime import datetime
from typing import Dict, List, Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    HRFlowable,
    Image,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from app.models.fields import ATTRIBUTE_FIELDS, BioField
from app.models.session import Portrait

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

IDENTITY_ROWS = [("Player", "playerName"), ("Sex", "sex"), ("Level", "level"), ("Ancestry", "ancestry")]
ATTRIBUTE_ROWS = [(key.capitalize(), key) for key in ATTRIBUTE_FIELDS]
OTHER_DETAIL_ROWS = [
    ("Health", "health"), ("Focus", "focus"), ("Marks", "marks"),
    ("Lifting Capacity", "liftingCapacity"), ("Movement", "movement"),
    ("Recovery Die", "recoveryDie"), ("Senses Range", "sensesRange"),
    ("Expertises", "expertises"), ("Talents", "talents"),
]

PORTRAIT_WIDTH = 80 * mm

_COLOR_PRIMARY = HexColor("#2c5aa0")
_COLOR_SECONDARY = HexColor("#8b4513")
_COLOR_TEXT = HexColor("#000000")
_COLOR_MUTED = HexColor("#666666")
_COLOR_RULE = HexColor("#d4af37")


def export_filename(values: Dict[str, str]) -> str:
    return f"{values.get('characterName') or 'Character'}_Bio.pdf"


def _value(values: Dict[str, str], key: str) -> str:
    return (values.get(key) or "").strip() or NOT_AVAILABLE


def _pdf_escape(text: str) -> str:
    """Escape text for ReportLab XML paragraphs."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _pdf_styles():
    base = getSampleStyleSheet()
    base.add(ParagraphStyle("BioTitle", fontName="Helvetica-Bold", fontSize=20,
                            leading=26, alignment=TA_CENTER,
                            textColor=_COLOR_PRIMARY, spaceAfter=10))
    base.add(ParagraphStyle("BioSection", fontName="Helvetica-Bold", fontSize=16,
                            leading=20, textColor=_COLOR_SECONDARY,
                            spaceBefore=6, spaceAfter=6))
    base.add(ParagraphStyle("BioSubsection", fontName="Helvetica-Bold", fontSize=12,
                            leading=16, textColor=_COLOR_TEXT,
                            spaceBefore=8, spaceAfter=4))
    base.add(ParagraphStyle("BioLine", fontName="Helvetica", fontSize=10,
                            leading=14, textColor=_COLOR_TEXT, spaceAfter=2))
    base.add(ParagraphStyle("BioLabel", fontName="Helvetica-Bold", fontSize=10,
                            leading=14, textColor=_COLOR_TEXT, spaceBefore=6))
    base.add(ParagraphStyle("BioBody", fontName="Helvetica", fontSize=10,
                            leading=14, textColor=_COLOR_TEXT, spaceAfter=6))
    return base


def _page_footer(canvas, doc):
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(_COLOR_MUTED)
    canvas.drawRightString(A4[0] - 20 * mm, 11 * mm, f"{doc.page}")
    canvas.restoreState()


def _portrait_flowable(portrait: Optional[Portrait]) -> Optional[Image]:
    """Scale the portrait to the column width. An unreadable image is skipped, not fatal."""
    if portrait is None or not portrait.data:
        return None
    try:
        width, height = ImageReader(io.BytesIO(portrait.data)).getSize()
    except Exception as e:
        logger.warning(f"[Export] Could not add image to PDF: {e}")
        return None
    if not width or not height:
        return None
    return Image(io.BytesIO(portrait.data), width=PORTRAIT_WIDTH, height=PORTRAIT_WIDTH * height / width)


def build_pdf(values: Dict[str, str], portrait: Optional[Portrait] = None) -> bytes:
    """
    Build the bio PDF.

    Page one: title, portrait with identity and attributes beside it, then the
    other details in two columns. Page two onward: every non-empty bio field in
    declaration order.
    """
    esc = _pdf_escape
    styles = _pdf_styles()
    buf = io.BytesIO()

    doc = BaseDocTemplate(buf, pagesize=A4,
                          leftMargin=20 * mm, rightMargin=20 * mm,
                          topMargin=20 * mm, bottomMargin=20 * mm,
                          title=export_filename(values)[:-4])
    frame = Frame(doc.leftMargin, doc.bottomMargin, doc.width, doc.height, id="normal")
    doc.addPageTemplates([PageTemplate(id="bio", frames=frame, onPage=_page_footer)])

    elements: list = []
    elements.append(Paragraph(esc(values.get("characterName") or "Character Bio"), styles["BioTitle"]))
    elements.append(Paragraph("Character Sheet", styles["BioSection"]))

    info: List = [Paragraph(esc(f"{label}: {_value(values, key)}"), styles["BioLine"]) for label, key in IDENTITY_ROWS]
    info.append(Paragraph("Attributes", styles["BioSubsection"]))
    info.extend(Paragraph(esc(f"{label}: {_value(values, key)}"), styles["BioLine"]) for label, key in ATTRIBUTE_ROWS)

    image = _portrait_flowable(portrait)
    if image is not None:
        side_by_side = Table([[image, info]], colWidths=[PORTRAIT_WIDTH + 15 * mm, doc.width - PORTRAIT_WIDTH - 15 * mm])
        side_by_side.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ]))
        elements.append(side_by_side)
    else:
        elements.extend(info)

    elements.append(Spacer(1, 6 * mm))
    elements.append(Paragraph("Other Details", styles["BioSubsection"]))
    cells = [Paragraph(esc(f"{label}: {_value(values, key)}"), styles["BioLine"]) for label, key in OTHER_DETAIL_ROWS]
    rows = [cells[i:i + 2] + [""] * (2 - len(cells[i:i + 2])) for i in range(0, len(cells), 2)]
    details = Table(rows, colWidths=[doc.width / 2, doc.width / 2])
    details.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
    ]))
    elements.append(details)

    elements.append(PageBreak())
    elements.append(Paragraph("Character Bio", styles["BioSection"]))
    elements.append(HRFlowable(width="100%", thickness=0.5, color=_COLOR_RULE, spaceBefore=2, spaceAfter=8))

    for bio_field in BioField:
        text = (values.get(bio_field.value) or "").strip()
        if not text:
            continue
        elements.append(Paragraph(esc(f"{bio_field.label}:"), styles["BioLabel"]))
        for para in text.split("\n\n"):
            para = para.strip()
            if para:
                elements.append(Paragraph(esc(para).replace("\n", "<br/>"), styles["BioBody"]))

    doc.build(elements)
    logger.info(f"[Export] PDF built for {values.get('characterName') or 'Character'}")
    return buf.getvalue()


_PRINT_STYLE = """
    body { font-family: 'Times New Roman', serif; max-width: 800px; margin: 0 auto; padding: 20px; line-height: 1.6; }
    h1 { color: #2c5aa0; text-align: center; border-bottom: 3px solid #d4af37; padding-bottom: 10px; }
    h2 { color: #8b4513; margin-top: 30px; }
    .section { margin-bottom: 20px; }
    .label { font-weight: bold; color: #2c3e50; }
    .content { margin-left: 20px; margin-bottom: 15px; white-space: pre-wrap; }
    .character-sheet { background: #f8f9fa; padding: 20px; border-radius: 10px; margin-bottom: 30px; }
    .stats-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 10px; }
    .portrait img { max-width: 300px; border-radius: 10px; margin: 20px auto; display: block; }
    @media print { body { margin: 0; } }
"""


def _print_section(label: str, value: str) -> str:
    return (
        '<div class="section">'
        f'<div class="label">{html.escape(label)}:</div>'
        f'<div class="content">{html.escape(value)}</div>'
        "</div>"
    )


def build_print_document(values: Dict[str, str], portrait: Optional[Portrait] = None) -> str:
    """Self-printing HTML version of the bio. Every value is escaped; the portrait is inlined."""
    name = values.get("characterName") or ""
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{html.escape(name or 'Character')} Bio</title>",
        f"<style>{_PRINT_STYLE}</style>",
        "</head>",
        "<body>",
        f"<h1>{html.escape(name or 'Character Name')}</h1>",
    ]

    if portrait is not None and portrait.data:
        encoded = base64.b64encode(portrait.data).decode("ascii")
        parts.append(
            f'<div class="portrait"><img src="data:{portrait.mime_type};base64,{encoded}" alt="Character Portrait"></div>'
        )

    parts.append('<div class="character-sheet">')
    parts.append("<h2>Character Sheet</h2>")
    parts.extend(_print_section(label, _value(values, key)) for label, key in IDENTITY_ROWS)
    parts.append("<h3>Attributes</h3>")
    parts.append('<div class="stats-grid">')
    parts.extend(
        f"<div><strong>{label}:</strong> {html.escape(_value(values, key))}</div>"
        for label, key in ATTRIBUTE_ROWS
    )
    parts.append("</div>")
    parts.append("<h3>Other Details</h3>")
    parts.extend(_print_section(label, _value(values, key)) for label, key in OTHER_DETAIL_ROWS)
    parts.append("</div>")

    parts.append("<h2>Character Bio</h2>")
    for bio_field in BioField:
        if bio_field is BioField.CATCHPHRASE:
            parts.append("<h2>Roleplaying</h2>")
        parts.append(_print_section(bio_field.label, _value(values, bio_field.value)))

    parts.append(f'<p style="color:#666;font-size:0.8em">Exported {datetime.now().strftime("%Y-%m-%d %H:%M")}</p>')
    parts.append("<script>window.onload = function () { setTimeout(function () { window.print(); }, 500); };</script>")
    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts)
