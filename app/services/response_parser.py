"""
AI Response Parser
Recovers the bio JSON object from a free-text model reply.

The text model is asked for "ONLY a valid JSON object" but routinely wraps it in
a code fence or over-escapes quotes inside dialogue (catchphrases especially).
Repairs are tried in a fixed order and the first one that parses wins:

    A  parse as-is
    B  collapse one level of quote escaping (\\" -> ")
    C  turn backslashed quotes inside string values into single quotes
    D  catchphrase-only repair of a doubly escaped quote
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Tuple

from app.core.errors import UnparseableResponse
from app.models.fields import BioField

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[\w-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")

# A backslash-run + quote that does not close a string (no , : } ] or end after it)
_INNER_ESCAPED_QUOTE = re.compile(r'\\+"(?!\s*(?:[,:}\]]|$))')

_CATCHPHRASE_QUOTE = re.compile(r'"catchphrase":\s*"([^"]*?)\\+"([^"]*?)"')


def strip_code_fence(text: str) -> str:
    """Trim whitespace and a surrounding ``` / ```json fence."""
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def _load_object(text: str) -> Dict[str, Any]:
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_direct(text: str) -> Dict[str, Any]:
    return _load_object(text)


def parse_unescaped_quotes(text: str) -> Dict[str, Any]:
    return _load_object(text.replace('\\"', '"'))


def parse_single_quoted_dialogue(text: str) -> Dict[str, Any]:
    return _load_object(_INNER_ESCAPED_QUOTE.sub("'", text))


def parse_catchphrase_repair(text: str) -> Dict[str, Any]:
    fixed = _CATCHPHRASE_QUOTE.sub(
        lambda m: f'"catchphrase": "{m.group(1)}\'{m.group(2)}"', text, count=1
    )
    return _load_object(fixed)


Strategy = Callable[[str], Dict[str, Any]]

STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("direct", parse_direct),
    ("unescaped_quotes", parse_unescaped_quotes),
    ("single_quoted_dialogue", parse_single_quoted_dialogue),
    ("catchphrase_repair", parse_catchphrase_repair),
)


def parse_ai_response(raw_text: str) -> Dict[str, Any]:
    """
    Parse a model reply into a JSON object.

    Raises:
        UnparseableResponse: input is empty/not text, or every strategy failed
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise UnparseableResponse(raw_text, ValueError("Invalid output text"))

    cleaned = strip_code_fence(raw_text)
    last_error = None

    for index, (name, strategy) in enumerate(STRATEGIES, start=1):
        try:
            result = strategy(cleaned)
        except (ValueError, RecursionError) as e:
            last_error = e
            logger.debug(f"[Parser] Strategy {index} ({name}) failed: {e}")
            continue
        logger.info(f"[Parser] JSON parsing succeeded with strategy {index} ({name})")
        return result

    logger.error(f"[Parser] All {len(STRATEGIES)} strategies failed. Raw text: {cleaned}")
    raise UnparseableResponse(raw_text, last_error)


def extract_bio_values(record: Dict[str, Any]) -> Dict[BioField, str]:
    """Keep declared bio keys with a usable value, in declaration order."""
    values = {}
    for field in BioField:
        value = record.get(field.value)
        if not value or isinstance(value, (dict, list)):
            continue
        values[field] = value if isinstance(value, str) else str(value)
    return values
