"""Shared pytest fixtures for the storyjournal test suite."""

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import MagicMock, AsyncMock


# ---------------------------------------------------------------------------
# Settings / database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        queue_file_path=tmp_path / "queue" / "offline-requests.json",
        sqlite_db_path=tmp_path / "journal.db",
        log_dir=tmp_path / "logs",
        max_queue_size=5,
        max_retry_attempts=3,
        request_timeout_seconds=5.0,
        chapter_backend="template",
        metadata_backend="on_device",
    )


@pytest.fixture
def db(settings):
    """Return an initialized Database instance backed by a temp file."""
    from models.database import Database
    return Database(settings.sqlite_db_path)


@pytest.fixture
def arc_store(db):
    from memory.story_arc_store import StoryArcStore
    return StoryArcStore(db)


# ---------------------------------------------------------------------------
# Network / handlers
# ---------------------------------------------------------------------------

@pytest.fixture
def online():
    from workflow.network import NetworkReachabilitySignal
    return NetworkReachabilitySignal(is_connected=True)


@pytest.fixture
def offline():
    from workflow.network import NetworkReachabilitySignal
    return NetworkReachabilitySignal(is_connected=False)


@pytest.fixture
def ok_handler():
    """Async handler that always succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def failing_handler():
    """Async handler that always raises."""
    return AsyncMock(side_effect=RuntimeError("boom"))


@pytest.fixture
def make_queue(settings):
    """Factory: build an OfflineRequestQueue with one handler for every type."""
    from models.enums import RequestType
    from workflow.offline_queue import OfflineRequestQueue

    created = []

    def _make(network, handler=None, callbacks=None, **overrides):
        queue_settings = settings.model_copy(update=overrides) if overrides else settings
        handler = handler or AsyncMock(return_value=None)
        queue = OfflineRequestQueue(
            queue_settings,
            {t: handler for t in RequestType},
            network,
            callbacks=callbacks,
        )
        created.append(queue)
        return queue

    yield _make
    for queue in created:
        queue.close()


@pytest.fixture
def recorder():
    """QueueCallback that records every event as a tuple."""

    class Recorder:
        def __init__(self):
            self.events = []

        def on_request_enqueued(self, request, evicted):
            self.events.append(("enqueued", request.id, evicted.id if evicted else None))

        def on_request_rejected(self, request, reason):
            self.events.append(("rejected", request.id, reason))

        def on_status_changed(self, request, old_status, note=None):
            self.events.append(("status", request.id, old_status.value, request.status.value, note))

        def on_drain_started(self, pending):
            self.events.append(("drain_started", pending))

        def on_drain_finished(self, processed):
            self.events.append(("drain_finished", processed))

    return Recorder()


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_entry():
    """A journal entry with every optional section filled in."""
    from models.journal import JournalEntry, PromptResponse
    return JournalEntry(
        id="entry-1",
        assignment_name="Essay 1",
        subject="Math",
        date=datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc),
        reflection_prompts=[PromptResponse(prompt="How did it go?", response="Good")],
        transcription="Hello",
        ai_summary="Nice work",
    )


@pytest.fixture
def saved_entry(db, sample_entry):
    db.save_journal_entry(sample_entry)
    return sample_entry


@pytest.fixture
def make_request():
    """Factory for OfflineRequests with increasing creation dates."""
    from models.request import OfflineRequest

    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(entry_id="entry-1", genre="Fantasy", **kwargs):
        counter["n"] += 1
        request = OfflineRequest.generate_story(entry_id, genre)
        request.creation_date = base + timedelta(minutes=counter["n"])
        for key, value in kwargs.items():
            setattr(request, key, value)
        return request

    return _make


# ---------------------------------------------------------------------------
# LLM / service mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_llm():
    """Return a MagicMock replacing AgentSDKClient."""
    llm = MagicMock()
    llm.chat = AsyncMock(return_value="A short chapter.")
    llm.chat_json = AsyncMock(return_value={
        "title": "The Glowing Map",
        "text": "Maya unrolled the map.\n\nIt glowed.",
        "cliffhanger": "Then the map began to whisper...",
        "feedback": "Great reflection today!",
    })
    llm.get_usage_summary.return_value = {"total_calls": 1}
    return llm


@pytest.fixture
def fake_extractor():
    from models.story import StoryMetadata
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=StoryMetadata(
        sentiment_score=0.5,
        themes=["soccer", "friend"],
        entities=["Maya"],
        key_phrases=["soccer", "friend"],
    ))
    return extractor


@pytest.fixture
def fake_generator():
    from models.story import ChapterResult
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=ChapterResult(
        text="Maya kicked the ball into the clouds.",
        cliffhanger="Where would it land?",
        chapter_id="ch-test",
    ))
    return generator
