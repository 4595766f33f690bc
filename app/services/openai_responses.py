"""
OpenAI Responses API Clients
Bio text generation (reasoning model + file search over the lore books) and
portrait generation through the image_generation tool.
Documentation: https://platform.openai.com/docs/api-reference/responses
"""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.core.config import Settings
from app.core.credentials import CredentialResolver
from app.core.errors import NetworkFailure, NoContent
from app.services.prompts import BIO_INSTRUCTIONS

logger = logging.getLogger(__name__)


class _ResponsesAPI:
    """Shared plumbing: auth headers and the response output list."""

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialResolver,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.credentials = credentials
        self._transport = transport
        self.url = settings.OPENAI_RESPONSES_URL

    async def _headers(self) -> Dict[str, str]:
        api_key = await self.credentials.get_api_key()
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    @staticmethod
    def _output_items(response: httpx.Response) -> List[Dict[str, Any]]:
        try:
            data = response.json()
        except ValueError:
            raise NoContent("AI response was not valid JSON") from None
        output = data.get("output") if isinstance(data, dict) else None
        if not isinstance(output, list):
            return []
        # Anything other than an object is not an output item
        return [item for item in output if isinstance(item, dict)]


class OpenAIResponsesClient(_ResponsesAPI):
    """Text generation client for character bios."""

    @staticmethod
    def narrowing_plan(file_ids: Sequence[str], max_attempts: int) -> List[List[str]]:
        """
        Reference files to attach on each attempt.

        Attempt 1 sends everything, attempt 2 keeps only the first file (when
        there was more than one), attempt 3 onward relies on the knowledge base alone.
        """
        plan = []
        for attempt in range(1, max_attempts + 1):
            if attempt == 1:
                plan.append(list(file_ids))
            elif attempt == 2 and len(file_ids) > 1:
                plan.append(list(file_ids[:1]))
            elif attempt >= 3:
                plan.append([])
            else:
                plan.append(list(file_ids))
        return plan

    def build_input(self, prompt: str, file_ids: Sequence[str]) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = [{"type": "input_text", "text": prompt}]
        for file_id in file_ids:
            content.append({"type": "input_file", "file_id": file_id})
        return [{"role": "user", "content": content}]

    def build_payload(self, prompt: str, file_ids: Sequence[str]) -> Dict[str, Any]:
        return {
            "model": self.settings.BIO_MODEL,
            "reasoning": {"effort": self.settings.BIO_REASONING_EFFORT},
            "input": self.build_input(prompt, file_ids),
            "tools": [
                {
                    "type": "file_search",
                    "vector_store_ids": [self.settings.BIO_VECTOR_STORE_ID],
                    "max_num_results": self.settings.BIO_MAX_SEARCH_RESULTS,
                }
            ],
            "instructions": BIO_INSTRUCTIONS,
        }

    async def generate_text(self, prompt: str, reference_file_ids: Optional[Sequence[str]] = None) -> str:
        """
        Run the bio request and return the model's message text.

        Non-success statuses and transport errors are retried with a fixed
        delay, attaching fewer reference files each time.

        Raises:
            MissingCredential: no API key
            NetworkFailure: every attempt failed
            NoContent: the reply had no message text
        """
        if reference_file_ids is None:
            reference_file_ids = self.settings.BIO_REFERENCE_FILE_IDS
        max_attempts = max(1, self.settings.BIO_MAX_ATTEMPTS)
        headers = await self._headers()
        last_error: Optional[NetworkFailure] = None

        logger.info(
            f"[OpenAI] Bio request: model={self.settings.BIO_MODEL}, "
            f"files={list(reference_file_ids)}, vector_store={self.settings.BIO_VECTOR_STORE_ID}"
        )

        async with httpx.AsyncClient(transport=self._transport, timeout=self.settings.BIO_REQUEST_TIMEOUT) as client:
            plan = self.narrowing_plan(reference_file_ids, max_attempts)
            for attempt, file_ids in enumerate(plan, start=1):
                if attempt == 2 and len(reference_file_ids) > 1:
                    logger.info("[OpenAI] Retrying with simplified approach...")
                elif attempt >= 3:
                    logger.info("[OpenAI] Final attempt with core knowledge only...")

                try:
                    response = await client.post(self.url, headers=headers, json=self.build_payload(prompt, file_ids))
                except httpx.HTTPError as e:
                    last_error = NetworkFailure(f"API request error: {e}")
                    logger.warning(f"[OpenAI] Attempt {attempt} error: {e}")
                else:
                    if response.is_success:
                        logger.info(f"[OpenAI] API call successful on attempt {attempt}")
                        return self._message_text(response)
                    last_error = NetworkFailure(
                        f"API request failed: {response.status_code} - {response.text}",
                        status=response.status_code,
                        body=response.text,
                    )
                    logger.warning(f"[OpenAI] Attempt {attempt} failed: {response.status_code} - {response.text}")

                if attempt < max_attempts:
                    logger.info(f"[OpenAI] Waiting {self.settings.BIO_RETRY_DELAY_SECONDS}s before retry...")
                    await asyncio.sleep(self.settings.BIO_RETRY_DELAY_SECONDS)

        raise NetworkFailure(
            f"API request failed after {max_attempts} attempts: {last_error}",
            status=last_error.status if last_error else None,
            body=last_error.details.get("body", "") if last_error else "",
        )

    def _message_text(self, response: httpx.Response) -> str:
        for item in self._output_items(response):
            if item.get("type") != "message":
                continue
            content = item.get("content") or []
            if content and isinstance(content[0], dict) and content[0].get("text"):
                return content[0]["text"]
        raise NoContent("No message content found in response")


class OpenAIImageClient(_ResponsesAPI):
    """Portrait generation through the Responses image_generation tool. Single attempt."""

    async def generate_image(
        self,
        prompt: str,
        reference_image: Optional[bytes] = None,
        reference_mime: Optional[str] = None,
    ) -> bytes:
        if reference_image:
            encoded = base64.b64encode(reference_image).decode("utf-8")
            model_input: Any = [{
                "role": "user",
                "content": [
                    {"type": "input_text", "text": prompt},
                    {"type": "input_image", "image_url": f"data:{reference_mime or 'image/png'};base64,{encoded}"},
                ],
            }]
        else:
            model_input = prompt

        payload = {
            "model": self.settings.IMAGE_MODEL,
            "input": model_input,
            "tools": [{"type": "image_generation"}],
        }
        headers = await self._headers()
        logger.info(f"[OpenAI] Image request: model={self.settings.IMAGE_MODEL}, reference={reference_image is not None}")

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.settings.IMAGE_REQUEST_TIMEOUT) as client:
                response = await client.post(self.url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise NetworkFailure(f"Image generation error: {e}") from e

        if not response.is_success:
            raise NetworkFailure(
                f"Image generation failed: {response.status_code} - {response.text}",
                status=response.status_code,
                body=response.text,
            )

        for item in self._output_items(response):
            if item.get("type") == "image_generation_call" and item.get("result"):
                try:
                    return base64.b64decode(item["result"])
                except ValueError:
                    raise NoContent("Image payload was not valid base64") from None

        raise NoContent("No image found in response")
