"""Tests for wiring the narrative engine from Settings."""

import pytest
from unittest.mock import MagicMock


class TestBuildEngine:
    def test_template_backend(self, settings):
        from agents.chapter_generator import TemplateChapterGenerator
        from agents.metadata_extractor import OnDeviceMetadataExtractor
        from workflow.engine import build_engine

        engine = build_engine(settings)
        try:
            assert isinstance(engine.extractor, OnDeviceMetadataExtractor)
            assert isinstance(engine.generator, TemplateChapterGenerator)
            assert engine.api is None
            assert engine.network.is_connected is False
        finally:
            engine.queue.close()

    def test_remote_backends_share_one_client(self, settings):
        from agents.chapter_generator import RemoteChapterGenerator
        from agents.metadata_extractor import RemoteMetadataExtractor
        from workflow.engine import build_engine

        remote = settings.model_copy(update={"chapter_backend": "remote", "metadata_backend": "remote"})
        engine = build_engine(remote)
        try:
            assert isinstance(engine.extractor, RemoteMetadataExtractor)
            assert isinstance(engine.generator, RemoteChapterGenerator)
            assert engine.extractor.api is engine.api
            assert engine.generator.api is engine.api
        finally:
            engine.queue.close()

    def test_agent_backend(self, settings, mock_llm):
        from agents.chapter_generator import AgentChapterGenerator
        from workflow.engine import build_engine

        engine = build_engine(settings.model_copy(update={"chapter_backend": "agent"}), llm_client=mock_llm)
        try:
            assert isinstance(engine.generator, AgentChapterGenerator)
            assert engine.generator.llm is mock_llm
        finally:
            engine.queue.close()

    def test_logging_callback_always_attached(self, settings, recorder):
        from workflow.callbacks import LoggingCallback
        from workflow.engine import build_engine

        engine = build_engine(settings, callbacks=[recorder])
        try:
            callbacks = engine.queue._callbacks
            assert isinstance(callbacks[0], LoggingCallback)
            assert callbacks[1] is recorder
        finally:
            engine.queue.close()


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_story_generated_on_reconnect(self, settings, sample_entry, offline):
        from workflow.engine import build_engine

        engine = build_engine(settings, network=offline)
        try:
            engine.db.save_journal_entry(sample_entry)
            request_id = await engine.manager.request_story(sample_entry.id, "Mystery")
            assert engine.queue.request_status(request_id) == "pending"

            await offline.update(True)
            assert engine.queue.request_status(request_id) == "completed"
            arcs = engine.arc_store.all_arcs()
            assert len(arcs) == 1
            assert arcs[0].chapter_text.startswith("A puzzling event had just occurred.")
        finally:
            await engine.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_api(self, settings):
        from unittest.mock import AsyncMock
        from workflow.engine import build_engine

        api = MagicMock()
        api.aclose = AsyncMock()
        engine = build_engine(settings.model_copy(update={"chapter_backend": "remote"}), api=api)
        await engine.aclose()
        api.aclose.assert_awaited_once()
