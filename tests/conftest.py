"""
Shared fixtures: settings without env/.env leakage, sessions, and fake AI clients.
"""

import base64
import json
from typing import List, Optional

import pytest

from app.core.config import Settings
from app.models.session import CharacterSession, SessionRegistry

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_settings(**overrides) -> Settings:
    values = {
        "OPENAI_API_KEY": "test-key",
        "API_KEY_ENDPOINT": "",
        "GEMINI_API_KEY": "",
        "IMAGE_PROVIDER": "openai",
        "BIO_REFERENCE_FILE_IDS": ["file-lore"],
        "BIO_RETRY_DELAY_SECONDS": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeTextClient:
    """Stands in for OpenAIResponsesClient; records prompts and replays a canned reply."""

    def __init__(self, reply: str = "{}", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []
        self.on_call = None

    async def generate_text(self, prompt, reference_file_ids=None):
        self.prompts.append(prompt)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.reply


class FakeImageClient:
    """Stands in for the portrait backends."""

    def __init__(self, image: bytes = PNG_BYTES, error: Optional[Exception] = None):
        self.image = image
        self.error = error
        self.calls = []

    async def generate_image(self, prompt, reference_image=None, reference_mime=None):
        self.calls.append({"prompt": prompt, "reference_image": reference_image, "reference_mime": reference_mime})
        if self.error:
            raise self.error
        return self.image


def bio_reply(**values) -> str:
    """A model reply wrapped in a json code fence, as the model usually answers."""
    return "```json\n" + json.dumps(values) + "\n```"


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def session():
    return CharacterSession()


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def text_client():
    return FakeTextClient()


@pytest.fixture
def image_client():
    return FakeImageClient()
