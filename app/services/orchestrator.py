"""
Generation Orchestrator
Runs the AI operations for one character session:

    bio:   snapshot form -> text model -> parse -> record history -> update display
    image: snapshot form -> portrait prompt -> image model -> store portrait

Each operation holds its own session latch, so a bio run and an image run may
overlap but neither can overlap itself. Field values and history are only
touched after a fully successful parse.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from app.core.errors import MissingRefinementInput, NoContent, StormforgeError
from app.models.fields import BioField
from app.models.history import VisualState
from app.models.session import BIO_OPERATION, IMAGE_OPERATION, CharacterSession, Portrait
from app.services.image_utils import detect_image_mime
from app.services.prompts import build_bio_request, build_portrait_prompt
from app.services.response_parser import extract_bio_values, parse_ai_response

logger = logging.getLogger(__name__)


class TextGenerationClient(Protocol):
    """Anything that turns a bio prompt into raw model text."""

    async def generate_text(self, prompt: str, reference_file_ids: Optional[Sequence[str]] = None) -> str:
        ...


class ImageGenerationClient(Protocol):
    """Anything that turns a portrait prompt (and optional reference) into image bytes."""

    async def generate_image(
        self,
        prompt: str,
        reference_image: Optional[bytes] = None,
        reference_mime: Optional[str] = None,
    ) -> bytes:
        ...


@dataclass
class BioGenerationResult:
    updated_fields: List[BioField] = field(default_factory=list)
    versions_added: int = 0


class GenerationOrchestrator:
    """AI operations for a single session."""

    def __init__(
        self,
        session: CharacterSession,
        text_client: Optional[TextGenerationClient] = None,
        image_client: Optional[ImageGenerationClient] = None,
        reference_file_ids: Optional[Sequence[str]] = None,
    ):
        self.session = session
        self.text_client = text_client
        self.image_client = image_client
        self.reference_file_ids = reference_file_ids

    async def generate_bio(self) -> BioGenerationResult:
        """
        Generate every bio field and commit the results as new versions.

        Raises:
            GenerationInProgress: a bio run is already in flight for this session
            MissingCredential, NetworkFailure, NoContent, UnparseableResponse
        """
        session = self.session
        start = datetime.now(timezone.utc)

        with session.latch(BIO_OPERATION):
            session.bio_started_at = start
            logger.info(f"[START] bio_generation | session={session.id}")
            try:
                prompt = build_bio_request(session.form_data())
                raw_text = await self.text_client.generate_text(prompt, self.reference_file_ids)
                values = extract_bio_values(parse_ai_response(raw_text))
                if not values:
                    raise NoContent("AI response contained no bio fields")
                result = self._apply_bio(values)
            except StormforgeError as e:
                logger.error(f"[ERROR] bio_generation | session={session.id} | {type(e).__name__}: {e}")
                raise
            finally:
                session.bio_started_at = None

        session.bio_generated = True
        duration = (datetime.now(timezone.utc) - start).total_seconds()
        logger.info(
            f"[COMPLETE] bio_generation | session={session.id} | Duration: {duration:.2f}s | "
            f"{len(result.updated_fields)} field(s), {result.versions_added} new version(s)"
        )
        return result

    def _apply_bio(self, values) -> BioGenerationResult:
        session = self.session
        result = BioGenerationResult()
        for bio_field, ai_value in values.items():
            original = session.bio[bio_field]
            result.versions_added += session.history.record_generation(bio_field, original, ai_value)
            session.bio[bio_field] = session.history.current_version(bio_field).value
            session.visual[bio_field] = VisualState.HIGHLIGHTED
            result.updated_fields.append(bio_field)
        return result

    async def generate_image(self) -> Portrait:
        """Generate a fresh portrait from the sheet and appearance."""
        prompt = build_portrait_prompt(self.session.form_data())
        return await self._run_image("image_generation", prompt)

    async def refine_image(
        self,
        instructions: str = "",
        reference_image: Optional[bytes] = None,
        reference_mime: Optional[str] = None,
    ) -> Portrait:
        """
        Regenerate the portrait with extra instructions and/or a reference image.

        Raises:
            MissingRefinementInput: neither instructions nor a reference were given
        """
        instructions = (instructions or "").strip()
        if not instructions and not reference_image:
            raise MissingRefinementInput()

        prompt = build_portrait_prompt(
            self.session.form_data(),
            additional_instructions=instructions,
            has_reference=bool(reference_image),
        )
        return await self._run_image("image_refinement", prompt, reference_image, reference_mime)

    async def _run_image(
        self,
        task_name: str,
        prompt: str,
        reference_image: Optional[bytes] = None,
        reference_mime: Optional[str] = None,
    ) -> Portrait:
        session = self.session
        with session.latch(IMAGE_OPERATION):
            logger.info(f"[START] {task_name} | session={session.id}")
            try:
                data = await self.image_client.generate_image(prompt, reference_image, reference_mime)
            except StormforgeError as e:
                logger.error(f"[ERROR] {task_name} | session={session.id} | {type(e).__name__}: {e}")
                raise
            session.portrait = Portrait(data=data, mime_type=detect_image_mime(data))

        logger.info(f"[COMPLETE] {task_name} | session={session.id} | {len(data)} bytes")
        return session.portrait
