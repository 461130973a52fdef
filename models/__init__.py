"""Models package: database, dataclass models, and enums."""

from models.database import Database
from models.request import (
    OfflineRequest,
    GenerateStoryPayload,
    SyncJournalEntryPayload,
    ExportDataPayload,
)
from models.journal import JournalEntry, PromptResponse, compose_entry_text
from models.story import StoryMetadata, ChapterResult, StoryArc
from models.enums import (
    RequestType,
    RequestStatus,
    ConnectionType,
    HandlerOutcome,
    STORY_GENRES,
)

__all__ = [
    "Database",
    "OfflineRequest",
    "GenerateStoryPayload",
    "SyncJournalEntryPayload",
    "ExportDataPayload",
    "JournalEntry",
    "PromptResponse",
    "compose_entry_text",
    "StoryMetadata",
    "ChapterResult",
    "StoryArc",
    "RequestType",
    "RequestStatus",
    "ConnectionType",
    "HandlerOutcome",
    "STORY_GENRES",
]
