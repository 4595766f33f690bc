"""
Application Configuration
Loads settings from environment variables.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Stormforge API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Credentials - pre-injected key, or a helper endpoint returning {"apiKey": "..."}
    OPENAI_API_KEY: str = ""
    API_KEY_ENDPOINT: str = ""

    # OpenAI Responses API
    OPENAI_RESPONSES_URL: str = "https://api.openai.com/v1/responses"

    # Bio generation (agentic text model with file search over the lore books)
    BIO_MODEL: str = "gpt-5"
    BIO_REASONING_EFFORT: str = "medium"
    # Welcome to Roshar PDF, pre-uploaded to avoid repeated uploads
    BIO_REFERENCE_FILE_IDS: List[str] = ["file-3VQDhPG6m61qHiGuwfFZ2x"]
    BIO_VECTOR_STORE_ID: str = "vs_68f837113fb481918c561f76853b87be"
    BIO_MAX_SEARCH_RESULTS: int = 15
    BIO_MAX_ATTEMPTS: int = 3
    BIO_RETRY_DELAY_SECONDS: float = 1.0
    BIO_REQUEST_TIMEOUT: float = 900.0  # research runs can take ~10 minutes

    # Portrait generation: "openai" (Responses image tool) or "gemini"
    IMAGE_PROVIDER: str = "openai"
    IMAGE_MODEL: str = "gpt-5-nano"
    IMAGE_REQUEST_TIMEOUT: float = 180.0
    GEMINI_API_KEY: str = ""
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator('OPENAI_API_KEY', 'GEMINI_API_KEY', mode='before')
    @classmethod
    def strip_api_keys(cls, v):
        """Strip whitespace and newlines from API keys loaded from secrets."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('IMAGE_PROVIDER')
    @classmethod
    def validate_image_provider(cls, v):
        v = v.lower()
        if v not in ("openai", "gemini"):
            raise ValueError(f"IMAGE_PROVIDER must be 'openai' or 'gemini'. Got: {v}")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
