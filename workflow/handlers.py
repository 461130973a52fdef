"""Request handlers: what the offline queue runs for each request type."""

import logging
from typing import cast

from agents.chapter_generator import ChapterGenerator
from agents.metadata_extractor import MetadataExtractor
from config.exceptions import JournalEntryNotFoundError, PersistenceError
from config.settings import Settings
from memory.story_arc_store import StoryArcStore
from models.database import Database
from models.enums import HandlerOutcome, RequestType
from models.journal import compose_entry_text
from models.request import GenerateStoryPayload, OfflineRequest
from models.story import ChapterResult
from workflow.offline_queue import RequestHandler

logger = logging.getLogger(__name__)


class GenerateStoryHandler:
    """Journal entry -> metadata -> chapter -> story arc."""

    def __init__(
        self,
        settings: Settings,
        db: Database,
        extractor: MetadataExtractor,
        generator: ChapterGenerator,
        arc_store: StoryArcStore,
    ):
        self.settings = settings
        self.db = db
        self.extractor = extractor
        self.generator = generator
        self.arc_store = arc_store

    async def __call__(self, request: OfflineRequest) -> ChapterResult:
        """Run the pipeline for one generateStory request.

        Raises:
            MissingPayloadError: If entryId or genre is absent.
            JournalEntryNotFoundError: If the entry no longer exists.
            TransientServiceError: If extraction or generation fails.
        """
        payload = cast(GenerateStoryPayload, request.payload())

        entry = self.db.get_journal_entry(payload.entry_id)
        if entry is None:
            raise JournalEntryNotFoundError(payload.entry_id)

        text = compose_entry_text(entry)
        metadata = await self.extractor.extract(text)

        user_id = payload.user_id or self.settings.default_user_id
        previous_arcs = self.arc_store.recent_arcs(self.settings.recent_arcs_limit)
        chapter = await self.generator.generate(metadata, user_id, payload.genre, previous_arcs)
        logger.info(
            "Generated %s chapter %s for entry %s", payload.genre, chapter.chapter_id, entry.id
        )

        try:
            self.arc_store.save_arc(chapter, metadata.themes or [], entry_id=entry.id)
        except PersistenceError as e:
            # the chapter was delivered; only future continuity is affected
            logger.error("Story arc for chapter %s not saved: %s", chapter.chapter_id, e)
        return chapter


class NotImplementedHandler:
    """Placeholder for request types with no backend yet."""

    def __init__(self, request_type: RequestType):
        self.request_type = request_type

    async def __call__(self, request: OfflineRequest) -> HandlerOutcome:
        request.payload()
        logger.warning("%s is not implemented; nothing was done for %s", self.request_type.value, request.id)
        return HandlerOutcome.NOT_IMPLEMENTED


def build_handlers(
    settings: Settings,
    db: Database,
    extractor: MetadataExtractor,
    generator: ChapterGenerator,
    arc_store: StoryArcStore,
) -> dict[RequestType, RequestHandler]:
    """Dispatch table covering every RequestType."""
    return {
        RequestType.GENERATE_STORY: GenerateStoryHandler(settings, db, extractor, generator, arc_store),
        RequestType.SYNC_JOURNAL_ENTRY: NotImplementedHandler(RequestType.SYNC_JOURNAL_ENTRY),
        RequestType.EXPORT_DATA: NotImplementedHandler(RequestType.EXPORT_DATA),
    }
