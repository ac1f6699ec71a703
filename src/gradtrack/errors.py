"""Exception types shared by the API, the assistant and the client.

Each error carries the HTTP status it maps to so the API layer can render it
without knowing where it was raised.
"""

from __future__ import annotations

from typing import Any


class GradTrackError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ServiceError(GradTrackError):
    status_code = 500
    default_message = "Service error"


class AssistantUnavailableError(ServiceError):
    default_message = "AI assistant is not configured"


class ModelOutputError(ServiceError):
    """Raised when model output cannot be parsed into the expected shape."""

    default_message = "Could not parse model output"
