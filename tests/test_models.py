"""Tests for the data models: requests, payloads, journal entries and stories."""

import json
from datetime import datetime, timezone

import pytest

from config.exceptions import MissingPayloadError
from models.enums import RequestStatus, RequestType, STORY_GENRES
from models.journal import JournalEntry, PromptResponse, compose_entry_text
from models.request import (
    OfflineRequest,
    GenerateStoryPayload,
    ExportDataPayload,
    format_timestamp,
    parse_timestamp,
)
from models.story import ChapterResult, StoryArc, StoryMetadata


class TestComposeEntryText:
    def test_full_entry_exact_text(self, sample_entry):
        assert compose_entry_text(sample_entry) == (
            "Hello\n\nAssignment: Essay 1\nSubject: Math\n\nHow did it go?: Good\n\nSummary: Nice work"
        )

    def test_without_transcription_or_summary(self):
        entry = JournalEntry(assignment_name="Lab", subject="Science")
        assert compose_entry_text(entry) == "Assignment: Lab\nSubject: Science\n\n"

    def test_selected_option_wins_over_response(self):
        entry = JournalEntry(
            assignment_name="A",
            subject="B",
            reflection_prompts=[
                PromptResponse(prompt="Mood", selected_option="Happy", response="ignored"),
                PromptResponse(prompt="Why", response="Because"),
                PromptResponse(prompt="Skipped"),
            ],
        )
        text = compose_entry_text(entry)
        assert "Mood: Happy\n" in text
        assert "Why: Because\n" in text
        assert "Skipped: (No response)\n" in text

    def test_empty_transcription_still_adds_separator(self):
        entry = JournalEntry(assignment_name="A", subject="B", transcription="")
        assert compose_entry_text(entry).startswith("\n\nAssignment: A")


class TestJournalEntrySerialization:
    def test_round_trip(self, sample_entry):
        restored = JournalEntry.from_dict(json.loads(json.dumps(sample_entry.to_dict())))
        assert restored == sample_entry

    def test_camel_case_keys(self, sample_entry):
        data = sample_entry.to_dict()
        assert data["assignmentName"] == "Essay 1"
        assert data["reflectionPrompts"][0]["prompt"] == "How did it go?"
        assert data["aiSummary"] == "Nice work"


class TestTimestamps:
    def test_format_uses_z_suffix(self):
        value = datetime(2025, 3, 1, 9, 30, 0, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2025-03-01T09:30:00Z"

    def test_parse_accepts_z_and_offsets(self):
        assert parse_timestamp("2025-03-01T09:30:00Z") == datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
        assert parse_timestamp("2025-03-01T10:30:00+01:00") == datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)

    def test_naive_values_are_utc(self):
        assert parse_timestamp("2025-03-01T09:30:00").tzinfo is not None


class TestOfflineRequest:
    def test_new_request_defaults(self):
        request = OfflineRequest.generate_story("e1", "Fantasy")
        assert request.type == RequestType.GENERATE_STORY
        assert request.status == RequestStatus.PENDING
        assert request.attempt_count == 0
        assert request.error_message is None
        assert request.data == {"entryId": "e1", "genre": "Fantasy"}

    def test_ids_are_unique(self):
        ids = {OfflineRequest.generate_story("e", "Fantasy").id for _ in range(100)}
        assert len(ids) == 100

    def test_wire_record_shape(self):
        request = OfflineRequest.generate_story("e1", "Mystery")
        record = request.to_dict()
        assert set(record) == {"id", "type", "data", "creationDate", "attemptCount", "status"}
        assert record["type"] == "generateStory"
        assert record["status"] == "pending"
        assert record["creationDate"].endswith("Z")

    def test_error_message_serialized_when_set(self):
        request = OfflineRequest.generate_story("e1", "Mystery")
        request.status = RequestStatus.FAILED
        request.error_message = "journal entry not found"
        assert request.to_dict()["errorMessage"] == "journal entry not found"

    def test_from_dict_round_trip(self):
        request = OfflineRequest.export_data(destination="/tmp/out.json")
        request.attempt_count = 2
        request.status = RequestStatus.FAILED
        request.error_message = "x"
        restored = OfflineRequest.from_dict(json.loads(json.dumps(request.to_dict())))
        assert restored == request

    def test_from_dict_rejects_unknown_type(self):
        record = OfflineRequest.generate_story("e1", "Fantasy").to_dict()
        record["type"] = "launchRocket"
        with pytest.raises(ValueError):
            OfflineRequest.from_dict(record)

    @pytest.mark.parametrize("record", ["garbage", None, ["id"]])
    def test_from_dict_rejects_non_object(self, record):
        with pytest.raises(ValueError):
            OfflineRequest.from_dict(record)

    def test_from_dict_rejects_numeric_date(self):
        record = OfflineRequest.generate_story("e1", "Fantasy").to_dict()
        record["creationDate"] = 1700000000
        with pytest.raises(ValueError, match="creationDate"):
            OfflineRequest.from_dict(record)

    def test_copy_is_independent(self):
        request = OfflineRequest.generate_story("e1", "Fantasy")
        clone = request.copy()
        clone.data["genre"] = "Mystery"
        clone.attempt_count = 3
        assert request.data["genre"] == "Fantasy"
        assert request.attempt_count == 0


class TestPayloads:
    def test_generate_story_payload(self):
        payload = OfflineRequest.generate_story("e1", "Fantasy", user_id="u1").payload()
        assert isinstance(payload, GenerateStoryPayload)
        assert payload.entry_id == "e1"
        assert payload.genre == "Fantasy"
        assert payload.user_id == "u1"

    def test_missing_genre_raises(self):
        request = OfflineRequest(type=RequestType.GENERATE_STORY, data={"entryId": "e1"})
        with pytest.raises(MissingPayloadError) as exc_info:
            request.payload()
        assert exc_info.value.message == "missing required data"
        assert exc_info.value.missing == ["genre"]

    def test_blank_entry_id_raises(self):
        request = OfflineRequest(type=RequestType.GENERATE_STORY, data={"entryId": "  ", "genre": "Fantasy"})
        with pytest.raises(MissingPayloadError):
            request.payload()

    def test_export_defaults(self):
        payload = OfflineRequest(type=RequestType.EXPORT_DATA).payload()
        assert isinstance(payload, ExportDataPayload)
        assert payload.format == "json"

    def test_sync_payload_accepts_empty_data(self):
        assert OfflineRequest(type=RequestType.SYNC_JOURNAL_ENTRY).payload().entry_id is None


class TestStoryModels:
    def test_metadata_empty(self):
        assert StoryMetadata().is_empty
        assert not StoryMetadata(themes=["soccer"]).is_empty

    def test_sentiment_label(self):
        assert StoryMetadata(sentiment_score=0.6).sentiment_label() == "positive"
        assert StoryMetadata(sentiment_score=-0.6).sentiment_label() == "negative"
        assert StoryMetadata(sentiment_score=0.05).sentiment_label() == "neutral"
        assert StoryMetadata().sentiment_label() == "neutral"

    def test_to_api_dict(self):
        metadata = StoryMetadata(sentiment_score=0.5, themes=["soccer"], key_phrases=["soccer"])
        assert metadata.to_api_dict() == {
            "sentiment": "0.50",
            "themes": ["soccer"],
            "entities": [],
            "keyPhrases": ["soccer"],
        }

    def test_chapter_ids_generated(self):
        a = ChapterResult(text="t", cliffhanger="c")
        b = ChapterResult(text="t", cliffhanger="c")
        assert a.chapter_id.startswith("ch-")
        assert a.chapter_id != b.chapter_id

    def test_arc_summary(self):
        arc = StoryArc(chapter_text="x" * 150, cliffhanger="c")
        assert arc.summary() == "x" * 100 + "..."
        assert StoryArc(chapter_text="short", cliffhanger="c").summary() == "short"

    def test_arc_from_chapter(self):
        chapter = ChapterResult(text="Once", cliffhanger="Then?", chapter_id="ch-1")
        arc = StoryArc.from_chapter(chapter, ["soccer"], entry_id="e1")
        assert arc.chapter_text == "Once"
        assert arc.chapter_id == "ch-1"
        assert arc.themes == ["soccer"]
        assert arc.entry_id == "e1"

    def test_genres_have_display_names(self):
        assert STORY_GENRES["Sci-Fi"] == "Science Fiction"
        assert len(STORY_GENRES) == 10
