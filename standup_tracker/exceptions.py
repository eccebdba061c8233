"""
Error types for the standup tracker.

Hierarchy:
    StandupTrackerError
    ├── StoreQueryError        reading/writing the relational store
    ├── AIRequestError         transport or HTTP failure calling the LLM
    ├── AIResponseParseError   model text is not valid JSON
    └── InvalidWeekRangeError  rejected manual week range
"""
from typing import Any, Dict, Optional


class StandupTrackerError(Exception):
    """Base exception for all standup tracker errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class StoreQueryError(StandupTrackerError):
    """A query or write against the database failed."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(
            f"Store operation '{operation}' failed: {cause}",
            details={"operation": operation},
        )


class AIRequestError(StandupTrackerError):
    """The completion endpoint could not be reached or returned an error."""

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message, details={"provider": provider, "status_code": status_code})


class AIResponseParseError(StandupTrackerError):
    """The model response could not be decoded as JSON."""

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)


class InvalidWeekRangeError(StandupTrackerError):
    """A requested week range is malformed or too long."""
