"""
Error Taxonomy
Exceptions raised by the history store, the response parser, and the AI clients.
Every error carries the HTTP status it maps to and a message safe to show the user.
"""

from typing import Optional


class StormforgeError(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    user_message: str = "Something went wrong."

    def __init__(self, message: str = None, retryable: bool = False, details: Optional[dict] = None):
        super().__init__(message or self.user_message)
        self.retryable = retryable
        self.details = details or {}


class UnknownField(StormforgeError):
    """Field key outside the declared bio field set."""

    status_code = 404

    def __init__(self, field):
        super().__init__(f"Unknown field: {field!r}", details={"field": str(field)})
        self.field = field
        self.user_message = f"Unknown field: {field}"


class VersionNotFound(StormforgeError):
    """A field with no recorded versions was asked for its current version."""

    status_code = 404

    def __init__(self, field):
        super().__init__(f"No versions recorded for field {field}", details={"field": str(field)})
        self.field = field
        self.user_message = f"No versions recorded for {field}"


class UnparseableResponse(StormforgeError):
    """Every parser strategy failed on the AI reply."""

    status_code = 502
    user_message = "Error parsing AI response. Please try generating again."

    def __init__(self, raw_text, last_error: Optional[Exception] = None):
        reason = f": {last_error}" if last_error else ""
        super().__init__(f"Could not parse AI response{reason}")
        self.raw_text = raw_text
        self.last_error = last_error


class MissingCredential(StormforgeError):
    """No API key could be resolved."""

    status_code = 503
    user_message = "API key not configured. Set OPENAI_API_KEY or API_KEY_ENDPOINT."


class NetworkFailure(StormforgeError):
    """Transport error or non-success status from the AI service."""

    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message, retryable=True, details={"status": status, "body": body})
        self.status = status
        self.user_message = message


class NoContent(StormforgeError):
    """The AI call succeeded but returned no usable payload."""

    status_code = 502

    def __init__(self, message: str = "No content found in AI response"):
        super().__init__(message)
        self.user_message = message


class GenerationInProgress(StormforgeError):
    """The latch for this operation is already held."""

    status_code = 409

    def __init__(self, operation: str):
        super().__init__(f"A {operation} generation is already running for this session")
        self.operation = operation
        self.user_message = str(self)


class SessionNotFound(StormforgeError):
    status_code = 404
    user_message = "Session not found"


class MissingRefinementInput(StormforgeError):
    status_code = 400
    user_message = "Please provide additional instructions or upload a reference image to refine the portrait."


__all__ = [
    "StormforgeError",
    "UnknownField",
    "VersionNotFound",
    "UnparseableResponse",
    "MissingCredential",
    "NetworkFailure",
    "NoContent",
    "GenerationInProgress",
    "SessionNotFound",
    "MissingRefinementInput",
]
