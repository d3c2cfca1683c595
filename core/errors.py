"""Custom exception types for the application wizard."""

from __future__ import annotations


class ApplicationError(Exception):
    """Base exception for application wizard issues."""


class UnknownFieldError(ApplicationError, KeyError):
    """Raised when a field name is not part of the active track's catalog."""

    def __init__(self, field: str) -> None:
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Unknown application field: {self.field!r}"


class UnknownSectionError(ApplicationError, KeyError):
    """Raised when a section key does not exist on the active track."""

    def __init__(self, section: str) -> None:
        super().__init__(section)
        self.section = section

    def __str__(self) -> str:
        return f"Unknown wizard section: {self.section!r}"


class MediaReadError(ApplicationError):
    """Raised when an uploaded image cannot be read or encoded."""


NETWORK_ERROR_MESSAGE = "Network error. Please ensure the backend server is running and try again."


class SubmissionError(ApplicationError):
    """Raised when the submission endpoint cannot be reached or answers garbage."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or NETWORK_ERROR_MESSAGE)
