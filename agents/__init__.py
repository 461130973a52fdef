"""Agents package: metadata extractors and chapter generators."""

from agents.base_agent import BaseAgent
from agents.metadata_extractor import (
    MetadataExtractor,
    OnDeviceMetadataExtractor,
    RemoteMetadataExtractor,
)
from agents.chapter_generator import (
    ChapterGenerator,
    RemoteChapterGenerator,
    AgentChapterGenerator,
    TemplateChapterGenerator,
)

__all__ = [
    "BaseAgent",
    "MetadataExtractor",
    "OnDeviceMetadataExtractor",
    "RemoteMetadataExtractor",
    "ChapterGenerator",
    "RemoteChapterGenerator",
    "AgentChapterGenerator",
    "TemplateChapterGenerator",
]
