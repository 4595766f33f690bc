"""
Gemini "Nano Banana" Portrait Service
Alternative portrait backend using native Gemini image generation (gemini-2.5-flash-image).
Documentation: https://ai.google.dev/gemini-api/docs/image-generation
"""

import logging
from typing import Optional

from google import genai
from google.genai import types

from app.core.config import Settings
from app.core.errors import MissingCredential, NetworkFailure, NoContent
from app.services.image_utils import detect_image_mime

logger = logging.getLogger(__name__)


class GeminiImageService:
    """Portrait generation and refinement with Gemini image models. Single attempt."""

    def __init__(self, settings: Settings, client: Optional[genai.Client] = None):
        self.settings = settings
        self.model_name = settings.GEMINI_IMAGE_MODEL or "gemini-2.5-flash-image"
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.settings.GEMINI_API_KEY:
                raise MissingCredential("Gemini API key not configured. Set GEMINI_API_KEY.")
            self._client = genai.Client(api_key=self.settings.GEMINI_API_KEY)
        return self._client

    async def generate_image(
        self,
        prompt: str,
        reference_image: Optional[bytes] = None,
        reference_mime: Optional[str] = None,
    ) -> bytes:
        """
        Generate a portrait, optionally steered by a reference image.

        Raises:
            MissingCredential: GEMINI_API_KEY is empty
            NetworkFailure: the API call failed
            NoContent: the reply carried no image (e.g. safety block)
        """
        contents = []
        if reference_image:
            contents.append(
                types.Part.from_bytes(
                    data=reference_image,
                    mime_type=reference_mime or detect_image_mime(reference_image, "image/jpeg"),
                )
            )
        contents.append(prompt)

        # TEXT+IMAGE is required when editing from a reference
        modalities = ["TEXT", "IMAGE"] if reference_image else ["IMAGE"]
        config = types.GenerateContentConfig(response_modalities=modalities)

        logger.info(f"[Gemini] Generating portrait with {self.model_name}, reference={reference_image is not None}")
        client = self.client
        try:
            response = await client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except Exception as e:
            raise NetworkFailure(f"Gemini image generation failed: {e}") from e

        # Direct parts access first, then the first candidate
        parts = getattr(response, "parts", None) or []
        if not parts and getattr(response, "candidates", None):
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                parts = candidate.content.parts

        for part in parts:
            if part.text is not None:
                logger.debug(f"[Gemini] Text part: {part.text}")
            elif part.inline_data is not None and part.inline_data.data:
                logger.info("[Gemini] Portrait generated")
                return part.inline_data.data

        finish_reason = "Unknown"
        if getattr(response, "candidates", None):
            finish_reason = response.candidates[0].finish_reason
        raise NoContent(f"No image generated. Finish Reason: {finish_reason}")
