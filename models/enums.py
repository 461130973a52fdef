"""Enumerations for offline request tracking and story generation."""

from enum import Enum


class RequestType(str, Enum):
    GENERATE_STORY = "generateStory"
    SYNC_JOURNAL_ENTRY = "syncJournalEntry"
    EXPORT_DATA = "exportData"


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    FAILED = "failed"


class ConnectionType(str, Enum):
    WIFI = "wifi"
    CELLULAR = "cellular"
    ETHERNET = "ethernet"
    UNKNOWN = "unknown"


class HandlerOutcome(str, Enum):
    """What a request handler reports back to the queue on success."""
    DONE = "done"
    NOT_IMPLEMENTED = "not_implemented"


# Genre key -> display name
STORY_GENRES: dict[str, str] = {
    "Fantasy": "Fantasy",
    "Sci-Fi": "Science Fiction",
    "Mystery": "Mystery",
    "Adventure": "Adventure",
    "Romance": "Romance",
    "Historical": "Historical Fiction",
    "Thriller": "Thriller",
    "Comedy": "Comedy",
    "Educational": "Educational",
    "Sports": "Sports",
}
