"""
Bio Generation Progress
Simulated progress for the long-running research call (the API gives no real progress).
Reaches 80% at ten minutes and never passes 95%.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

PROGRESS_MESSAGES = [
    "Researching Roshar lore",
    "Analyzing cultural backgrounds",
    "Exploring social structures",
    "Mapping regional details",
    "Investigating historical events",
    "Crafting character elements",
    "Synthesizing final details",
]
MESSAGE_INTERVAL_SECONDS = 4


@dataclass
class ProgressSnapshot:
    in_progress: bool
    message: str = ""
    percent: float = 0.0
    elapsed_seconds: int = 0
    elapsed_display: str = ""


def progress_percent(elapsed: float) -> float:
    slow_phase = (elapsed - 600) / 1800 * 15 if elapsed > 600 else 0
    return min(95.0, elapsed / 600 * 80 + slow_phase)


def format_elapsed(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    return f"{seconds // 60}m {seconds % 60}s"


def snapshot(started_at: Optional[datetime], now: Optional[datetime] = None) -> ProgressSnapshot:
    if started_at is None:
        return ProgressSnapshot(in_progress=False)
    now = now or datetime.now(timezone.utc)
    elapsed = max(0, int((now - started_at).total_seconds()))
    message = PROGRESS_MESSAGES[(elapsed // MESSAGE_INTERVAL_SECONDS) % len(PROGRESS_MESSAGES)]
    return ProgressSnapshot(
        in_progress=True,
        message=message,
        percent=round(progress_percent(elapsed), 1),
        elapsed_seconds=elapsed,
        elapsed_display=format_elapsed(elapsed),
    )
