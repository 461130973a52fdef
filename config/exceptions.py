"""Custom exception hierarchy for the narrative engine."""

from typing import Optional


class NarrativeEngineError(Exception):
    """Base exception for all narrative engine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Validation Errors ----

class ValidationError(NarrativeEngineError):
    """Input validation failed."""


class MissingPayloadError(ValidationError):
    """A queued request lacks fields its handler needs."""

    def __init__(self, missing: list[str]):
        super().__init__("missing required data", {"missing": ",".join(missing)})
        self.missing = missing


class InvalidConfigError(ValidationError):
    """Configuration value is invalid."""


# ---- Lookup Errors ----

class NotFoundError(NarrativeEngineError):
    """A referenced record does not exist."""


class JournalEntryNotFoundError(NotFoundError):
    """The journal entry a request points at is gone."""

    def __init__(self, entry_id: str):
        super().__init__("journal entry not found", {"entry_id": entry_id})
        self.entry_id = entry_id


# ---- Service Errors ----

class TransientServiceError(NarrativeEngineError):
    """Network or remote service failure; retrying may succeed."""


class ServiceTimeoutError(TransientServiceError):
    """Remote service did not answer in time."""


class ServiceHTTPError(TransientServiceError):
    """Remote service answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = ""):
        msg = message or f"Received an invalid response from the server (status {status_code})"
        super().__init__(msg, {"status_code": status_code})
        self.status_code = status_code


class ServiceResponseError(TransientServiceError):
    """Remote service answered with a body we could not decode."""

    def __init__(self, message: str = "Failed to decode the server response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details)
        self.raw_response = raw_response


class RequestTimeoutError(TransientServiceError):
    """A queued request's handler ran past the per-request timeout."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"request timed out after {timeout_seconds:g} seconds")
        self.timeout_seconds = timeout_seconds


# ---- LLM Errors ----

class LLMError(TransientServiceError):
    """Base exception for LLM API errors."""


class LLMTimeoutError(LLMError):
    """LLM API request timed out."""


class LLMResponseParseError(LLMError):
    """Failed to parse LLM response."""

    def __init__(self, message: str = "Failed to parse LLM response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details)
        self.raw_response = raw_response


# ---- Capacity Errors ----

class CapacityError(NarrativeEngineError):
    """A bounded resource has no room left."""


class QueueFullError(CapacityError):
    """Offline queue is full of in-progress/completed requests."""

    def __init__(self, max_size: int):
        super().__init__("offline queue is full", {"max_size": max_size})
        self.max_size = max_size


# ---- Persistence Errors ----

class PersistenceError(NarrativeEngineError):
    """Durable storage read or write failed."""


class DatabaseError(PersistenceError):
    """Database operation failed."""


class QueueStorageError(PersistenceError):
    """Queue snapshot file could not be read or written."""
