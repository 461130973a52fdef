"""Configuration package: settings, logging, and exceptions."""

from config.exceptions import (
    NarrativeEngineError,
    ValidationError,
    MissingPayloadError,
    InvalidConfigError,
    NotFoundError,
    JournalEntryNotFoundError,
    TransientServiceError,
    ServiceTimeoutError,
    ServiceHTTPError,
    ServiceResponseError,
    RequestTimeoutError,
    LLMError,
    LLMTimeoutError,
    LLMResponseParseError,
    CapacityError,
    QueueFullError,
    PersistenceError,
    DatabaseError,
    QueueStorageError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "NarrativeEngineError",
    "ValidationError",
    "MissingPayloadError",
    "InvalidConfigError",
    "NotFoundError",
    "JournalEntryNotFoundError",
    "TransientServiceError",
    "ServiceTimeoutError",
    "ServiceHTTPError",
    "ServiceResponseError",
    "RequestTimeoutError",
    "LLMError",
    "LLMTimeoutError",
    "LLMResponseParseError",
    "CapacityError",
    "QueueFullError",
    "PersistenceError",
    "DatabaseError",
    "QueueStorageError",
]
