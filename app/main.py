"""
Stormforge API - Character Bio Forge
FastAPI Backend Entry Point
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import Settings, settings
from app.core.credentials import CredentialResolver
from app.core.errors import StormforgeError
from app.core.logging import setup_logging
from app.models.session import SessionRegistry
from app.services.gemini_image import GeminiImageService
from app.services.openai_responses import OpenAIImageClient, OpenAIResponsesClient
from app.api import export, generate, sessions

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def build_clients(config: Settings):
    """Text and image clients for the configured providers."""
    credentials = CredentialResolver(config)
    text_client = OpenAIResponsesClient(config, credentials)
    if config.IMAGE_PROVIDER == "gemini":
        image_client = GeminiImageService(config)
    else:
        image_client = OpenAIImageClient(config, credentials)
    return text_client, image_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.registry = SessionRegistry()
    app.state.text_client, app.state.image_client = build_clients(settings)
    logger.info(f"Bio model: {settings.BIO_MODEL} | Image provider: {settings.IMAGE_PROVIDER}")
    yield
    logger.info(f"Shutting down {settings.APP_NAME} ({len(app.state.registry)} open session(s) discarded)")


app = FastAPI(
    title="Stormforge API",
    description="Character sheet and AI bio forge with per-field version history",
    version=VERSION,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StormforgeError)
async def stormforge_error_handler(request: Request, exc: StormforgeError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} -> {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.user_message, "error": type(exc).__name__},
    )


# Include routers
app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["Sessions"])
app.include_router(generate.router, prefix="/api/v1/sessions", tags=["Generation"])
app.include_router(export.router, prefix="/api/v1/sessions", tags=["Export"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check with provider configuration (never the keys themselves)."""
    status = {
        "status": "healthy",
        "version": VERSION,
        "environment": {
            "bio_model": settings.BIO_MODEL,
            "image_provider": settings.IMAGE_PROVIDER,
        },
        "services": {},
    }

    has_openai_key = bool(settings.OPENAI_API_KEY or settings.API_KEY_ENDPOINT)
    status["services"]["openai"] = "configured" if has_openai_key else "missing credentials"
    if settings.IMAGE_PROVIDER == "gemini":
        status["services"]["gemini"] = "configured" if settings.GEMINI_API_KEY else "missing credentials"

    if "missing credentials" in status["services"].values():
        status["status"] = "degraded"
    return status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": "Stormforge API - Character Bio Forge",
        "docs": "/docs",
        "health": "/health",
    }
