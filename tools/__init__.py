"""Tools package: Agent SDK client, narrative API client, text heuristics, JSON parsing."""

from tools.agent_sdk_client import AgentSDKClient
from tools.llm_client import parse_json_response
from tools.narrative_api import (
    NarrativeAPIClient,
    MetadataPayload,
    ChapterGenerationRequest,
    ChapterResponse,
)
from tools.response_cache import ResponseCache, cache_key
from tools.text_utils import (
    split_sentences,
    split_into_paragraphs,
    tokenize_words,
    count_words,
    lemmatize,
    extract_themes,
    extract_entities,
    score_sentiment,
)

__all__ = [
    "AgentSDKClient",
    "parse_json_response",
    "NarrativeAPIClient",
    "MetadataPayload",
    "ChapterGenerationRequest",
    "ChapterResponse",
    "ResponseCache",
    "cache_key",
    "split_sentences",
    "split_into_paragraphs",
    "tokenize_words",
    "count_words",
    "lemmatize",
    "extract_themes",
    "extract_entities",
    "score_sentiment",
]
