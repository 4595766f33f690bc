"""
Logging Setup
Configures the root logger once for the API process and the launcher script.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging.

    Args:
        level: Level name (DEBUG, INFO, ...); unknown names fall back to INFO
    """
    numeric = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger()

    # Avoid duplicate handlers when the app is reloaded in-process
    if any(getattr(h, "_stormforge", False) for h in root.handlers):
        root.setLevel(numeric)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._stormforge = True
    root.addHandler(handler)
    root.setLevel(numeric)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
