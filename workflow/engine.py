"""Composition root: builds the narrative engine object graph from Settings."""

import logging
from dataclasses import dataclass
from typing import Optional

from agents.chapter_generator import (
    AgentChapterGenerator,
    ChapterGenerator,
    RemoteChapterGenerator,
    TemplateChapterGenerator,
)
from agents.metadata_extractor import (
    MetadataExtractor,
    OnDeviceMetadataExtractor,
    RemoteMetadataExtractor,
)
from config.settings import Settings, get_settings
from memory.story_arc_store import StoryArcStore
from models.database import Database
from tools.agent_sdk_client import AgentSDKClient
from tools.narrative_api import NarrativeAPIClient
from workflow.callbacks import LoggingCallback, QueueCallback
from workflow.handlers import build_handlers
from workflow.narrative_manager import NarrativeEngineManager
from workflow.network import NetworkReachabilitySignal
from workflow.offline_queue import OfflineRequestQueue

logger = logging.getLogger(__name__)


@dataclass
class NarrativeEngine:
    settings: Settings
    db: Database
    arc_store: StoryArcStore
    extractor: MetadataExtractor
    generator: ChapterGenerator
    network: NetworkReachabilitySignal
    queue: OfflineRequestQueue
    manager: NarrativeEngineManager
    api: Optional[NarrativeAPIClient] = None

    async def aclose(self) -> None:
        """Detach from the network signal and close HTTP connections."""
        self.queue.close()
        if self.api is not None:
            await self.api.aclose()


def build_engine(
    settings: Optional[Settings] = None,
    network: Optional[NetworkReachabilitySignal] = None,
    llm_client: Optional[AgentSDKClient] = None,
    api: Optional[NarrativeAPIClient] = None,
    callbacks: Optional[list[QueueCallback]] = None,
) -> NarrativeEngine:
    """Wire database, backends, handlers, queue and manager.

    Args:
        settings: Defaults to ``get_settings()``.
        network: Reachability signal; defaults to a disconnected signal the
            host updates.
        llm_client: Agent SDK client for the ``agent`` chapter backend.
        api: Narrative service client for the ``remote`` backends.
        callbacks: Queue observers; a LoggingCallback is always attached.
    """
    settings = settings or get_settings()
    network = network or NetworkReachabilitySignal()

    db = Database(settings.sqlite_db_path)
    arc_store = StoryArcStore(db)

    needs_api = settings.metadata_backend == "remote" or settings.chapter_backend == "remote"
    if needs_api and api is None:
        api = NarrativeAPIClient(settings)

    extractor: MetadataExtractor
    if settings.metadata_backend == "remote":
        extractor = RemoteMetadataExtractor(api)
    else:
        extractor = OnDeviceMetadataExtractor(max_themes=settings.max_themes)

    generator: ChapterGenerator
    if settings.chapter_backend == "remote":
        generator = RemoteChapterGenerator(api)
    elif settings.chapter_backend == "agent":
        generator = AgentChapterGenerator(llm_client, settings)
    else:
        generator = TemplateChapterGenerator()

    handlers = build_handlers(settings, db, extractor, generator, arc_store)
    queue = OfflineRequestQueue(
        settings,
        handlers,
        network,
        callbacks=[LoggingCallback(), *(callbacks or [])],
    )
    manager = NarrativeEngineManager(settings, db, queue)

    logger.info(
        "Narrative engine ready (metadata=%s, chapters=%s, queue=%s)",
        settings.metadata_backend, settings.chapter_backend, settings.queue_file_path,
    )
    return NarrativeEngine(
        settings=settings,
        db=db,
        arc_store=arc_store,
        extractor=extractor,
        generator=generator,
        network=network,
        queue=queue,
        manager=manager,
        api=api,
    )
