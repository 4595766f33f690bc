"""
API Key Resolution
The OpenAI key is either injected through configuration or served by a small
helper endpoint (a serverless function returning {"apiKey": "..."}).
Only the AI clients ask for it.
"""

import logging
from typing import Optional

import httpx

from app.core.config import Settings
from app.core.errors import MissingCredential

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Resolves and caches the OpenAI API key."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport
        self._api_key = settings.OPENAI_API_KEY

    async def _fetch_from_endpoint(self) -> str:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
                response = await client.get(self.settings.API_KEY_ENDPOINT)
                response.raise_for_status()
                return (response.json().get("apiKey") or "").strip()
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"[Credentials] Failed to get API key from helper endpoint: {e}")
            return ""

    async def get_api_key(self) -> str:
        """
        Return the API key, looking it up once if it was not configured.

        Raises:
            MissingCredential: no key configured and the helper endpoint gave none
        """
        if not self._api_key and self.settings.API_KEY_ENDPOINT:
            self._api_key = await self._fetch_from_endpoint()
            if self._api_key:
                logger.info("[Credentials] API key loaded from helper endpoint")

        if not self._api_key:
            raise MissingCredential()
        return self._api_key
