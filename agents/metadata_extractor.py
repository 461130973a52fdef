"""Metadata extractors: turn journal text into StoryMetadata.

Two interchangeable backends share the ``MetadataExtractor`` protocol:

* ``OnDeviceMetadataExtractor``: local heuristics, no network, deterministic.
* ``RemoteMetadataExtractor``: delegates to the narrative service.
"""

import logging
from typing import Optional, Protocol

from models.story import StoryMetadata
from tools.narrative_api import NarrativeAPIClient
from tools.text_utils import extract_entities, extract_themes, score_sentiment

logger = logging.getLogger(__name__)

# Coarse labels the service may send instead of a numeric score.
SENTIMENT_LABELS: dict[str, float] = {
    "very positive": 0.8,
    "positive": 0.5,
    "happy": 0.5,
    "neutral": 0.0,
    "mixed": 0.0,
    "negative": -0.5,
    "sad": -0.5,
    "very negative": -0.8,
}


class MetadataExtractor(Protocol):
    async def extract(self, text: str) -> StoryMetadata:
        ...


def parse_sentiment(value: Optional[str]) -> Optional[float]:
    """Numeric strings become a clamped float, known labels map to a score."""
    if value is None:
        return None
    text = value.strip()
    try:
        return max(-1.0, min(1.0, float(text)))
    except ValueError:
        return SENTIMENT_LABELS.get(text.lower())


class OnDeviceMetadataExtractor:
    """Sentiment, names and themes computed locally.

    Key phrases mirror the themes; the service-side extractor is the one
    that produces real multi-word phrases.
    """

    def __init__(self, max_themes: int = 5):
        self.max_themes = max_themes

    async def extract(self, text: str) -> StoryMetadata:
        return self.analyze(text)

    def analyze(self, text: str) -> StoryMetadata:
        """Synchronous extraction, shared by ``extract`` and the CLI."""
        if not text or not text.strip():
            return StoryMetadata()

        themes = extract_themes(text, limit=self.max_themes)
        entities = extract_entities(text)
        metadata = StoryMetadata(
            sentiment_score=score_sentiment(text),
            themes=themes or None,
            entities=entities or None,
            key_phrases=list(themes) or None,
        )
        logger.debug(
            "On-device metadata: sentiment=%s themes=%s entities=%s",
            metadata.sentiment_score, metadata.themes, metadata.entities,
        )
        return metadata


class RemoteMetadataExtractor:
    """Metadata from ``POST /api/metadata``."""

    def __init__(self, api: NarrativeAPIClient):
        self.api = api

    async def extract(self, text: str) -> StoryMetadata:
        if not text or not text.strip():
            return StoryMetadata()

        payload = await self.api.fetch_metadata(text)
        return StoryMetadata(
            sentiment_score=parse_sentiment(payload.sentiment),
            themes=list(payload.themes) or None,
            entities=list(payload.entities) or None,
            key_phrases=list(payload.key_phrases) or None,
        )
