"""Story arc store: persisted chapters that give future chapters continuity."""

import logging
from typing import Optional

from config.exceptions import PersistenceError
from models.database import Database
from models.story import ChapterResult, StoryArc

logger = logging.getLogger(__name__)


class StoryArcStore:
    """Appends story arcs and serves the "N most recent" continuity view."""

    def __init__(self, db: Database):
        self.db = db

    def save_arc(
        self,
        chapter: ChapterResult,
        themes: list[str],
        entry_id: Optional[str] = None,
    ) -> StoryArc:
        """Persist a new arc built from a generated chapter.

        Raises:
            PersistenceError: If the arc could not be written. The chapter
                itself is unaffected; only future continuity degrades.
        """
        arc = StoryArc.from_chapter(chapter, themes, entry_id=entry_id)
        try:
            arc.id = self.db.create_story_arc(arc)
        except PersistenceError:
            logger.error("Failed to save story arc for chapter %s", chapter.chapter_id)
            raise
        logger.info(
            "Story arc %d saved (chapter=%s, themes=%s)", arc.id, arc.chapter_id, arc.themes
        )
        return arc

    def recent_arcs(self, limit: int) -> list[str]:
        """Chapter text of up to ``limit`` newest arcs, newest first."""
        return [arc.chapter_text for arc in self.recent_arc_records(limit)]

    def recent_arc_records(self, limit: int) -> list[StoryArc]:
        return self.db.get_recent_story_arcs(limit)

    def all_arcs(self) -> list[StoryArc]:
        """Every arc, oldest first (story map order)."""
        return self.db.list_story_arcs()

    def arc_count(self) -> int:
        return self.db.count_story_arcs()
