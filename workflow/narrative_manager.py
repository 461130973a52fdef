"""Narrative engine manager: story preferences and the story request entry point."""

import logging
from typing import Optional

from config.settings import Settings
from models.database import Database
from models.enums import STORY_GENRES
from models.request import OfflineRequest
from workflow.offline_queue import OfflineRequestQueue

logger = logging.getLogger(__name__)

PREF_STORY_GENERATION_ENABLED = "story_generation_enabled"
PREF_DEFAULT_GENRE = "default_genre"
PREF_SHOW_WRITING_PROMPTS = "show_writing_prompts"


class NarrativeEngineManager:
    """Front door for story generation.

    Preferences are stored in the database ``preferences`` table so they
    survive restarts; story requests go through the offline queue.
    """

    def __init__(self, settings: Settings, db: Database, queue: OfflineRequestQueue):
        self.settings = settings
        self.db = db
        self.queue = queue

    # ---- Preferences ----

    def _get_flag(self, key: str, default: bool) -> bool:
        value = self.db.get_preference(key)
        if value is None:
            return default
        return value == "1"

    def _set_flag(self, key: str, value: bool) -> None:
        self.db.set_preference(key, "1" if value else "0")

    @property
    def genres(self) -> dict[str, str]:
        """Genre key -> display name."""
        return dict(STORY_GENRES)

    @property
    def story_generation_enabled(self) -> bool:
        return self._get_flag(PREF_STORY_GENERATION_ENABLED, True)

    @property
    def show_writing_prompts(self) -> bool:
        return self._get_flag(PREF_SHOW_WRITING_PROMPTS, True)

    @property
    def default_genre(self) -> str:
        stored = self.db.get_preference(PREF_DEFAULT_GENRE)
        if stored in STORY_GENRES:
            return stored
        return self.settings.default_genre

    def set_default_genre(self, genre: str) -> bool:
        """Persist a new default genre. Unknown genres are ignored (returns False)."""
        if genre not in STORY_GENRES:
            logger.warning("Unknown genre %r; default stays %s", genre, self.default_genre)
            return False
        self.db.set_preference(PREF_DEFAULT_GENRE, genre)
        logger.info("Default genre set to %s", genre)
        return True

    def toggle_story_generation(self) -> bool:
        """Flip story generation on/off; returns the new value."""
        enabled = not self.story_generation_enabled
        self._set_flag(PREF_STORY_GENERATION_ENABLED, enabled)
        logger.info("Story generation %s", "enabled" if enabled else "disabled")
        return enabled

    def toggle_writing_prompts(self) -> bool:
        shown = not self.show_writing_prompts
        self._set_flag(PREF_SHOW_WRITING_PROMPTS, shown)
        return shown

    # ---- Requests ----

    async def request_story(self, entry_id: str, genre: Optional[str] = None) -> Optional[str]:
        """Queue a chapter for a journal entry.

        Args:
            entry_id: Journal entry to build the chapter from.
            genre: Genre key; defaults to the stored default genre.

        Returns:
            The request id, or None if story generation is disabled or the
            queue rejected the request.
        """
        if not self.story_generation_enabled:
            logger.info("Story generation disabled; not queuing entry %s", entry_id)
            return None

        genre = genre or self.default_genre
        if genre not in STORY_GENRES:
            logger.warning("Genre %r is not a known genre; sending it as-is", genre)

        request = OfflineRequest.generate_story(entry_id, genre)
        if not await self.queue.enqueue(request):
            return None
        return request.id

    async def process_offline_requests(self) -> int:
        """Drain the queue now (no-op while offline)."""
        return await self.queue.process_all_pending_requests()

    @property
    def pending_request_count(self) -> int:
        return self.queue.pending_request_count
