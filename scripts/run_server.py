#!/usr/bin/env python3
"""
API Server Startup Script
Starts the Stormforge API under uvicorn.

Usage:
    python scripts/run_server.py                     # 0.0.0.0:8000
    python scripts/run_server.py --port 9000 --reload
    python scripts/run_server.py --log-level DEBUG
"""

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn

from app.core.config import settings
from app.core.logging import setup_logging

logger = logging.getLogger("stormforge.server")


def main():
    parser = argparse.ArgumentParser(description="Start the Stormforge API server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 8000)), help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Application log level",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    settings.LOG_LEVEL = args.log_level
    os.environ["LOG_LEVEL"] = args.log_level  # picked up by reload workers

    logger.info(f"Starting {settings.APP_NAME} on {args.host}:{args.port}")
    logger.info(f"Bio model: {settings.BIO_MODEL} | Image provider: {settings.IMAGE_PROVIDER}")
    if not (settings.OPENAI_API_KEY or settings.API_KEY_ENDPOINT):
        logger.warning("No OPENAI_API_KEY or API_KEY_ENDPOINT configured; generation requests will fail")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
