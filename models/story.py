"""Story metadata, generated chapters, and story arcs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from models.request import utc_now


@dataclass
class StoryMetadata:
    """Structured signal extracted from journal text.

    Empty lists are represented as None, matching the remote service's
    "nothing found" answer.
    """
    sentiment_score: Optional[float] = None
    themes: Optional[list[str]] = None
    entities: Optional[list[str]] = None
    key_phrases: Optional[list[str]] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.sentiment_score is None
            and not self.themes
            and not self.entities
            and not self.key_phrases
        )

    def sentiment_label(self) -> str:
        """Coarse label used when a service expects a sentiment string."""
        if self.sentiment_score is None:
            return "neutral"
        if self.sentiment_score > 0.1:
            return "positive"
        if self.sentiment_score < -0.1:
            return "negative"
        return "neutral"

    def to_api_dict(self) -> dict:
        return {
            "sentiment": (
                f"{self.sentiment_score:.2f}" if self.sentiment_score is not None else "neutral"
            ),
            "themes": list(self.themes or []),
            "entities": list(self.entities or []),
            "keyPhrases": list(self.key_phrases or []),
        }


@dataclass
class ChapterResult:
    """A generated chapter: narrative text plus a cliffhanger."""
    text: str
    cliffhanger: str
    chapter_id: str = field(default_factory=lambda: f"ch-{uuid4()}")
    student_name: Optional[str] = None
    feedback: Optional[str] = None
    title: Optional[str] = None


@dataclass
class StoryArc:
    """A persisted chapter + themes record used for narrative continuity."""
    chapter_text: str
    cliffhanger: str
    themes: list[str] = field(default_factory=list)
    chapter_id: str = ""
    entry_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    id: Optional[int] = None

    def summary(self, max_chars: int = 100) -> str:
        """Leading slice of the chapter text, ellipsised."""
        if len(self.chapter_text) <= max_chars:
            return self.chapter_text
        return self.chapter_text[:max_chars] + "..."

    @classmethod
    def from_chapter(
        cls, chapter: ChapterResult, themes: list[str], entry_id: Optional[str] = None
    ) -> "StoryArc":
        return cls(
            chapter_text=chapter.text,
            cliffhanger=chapter.cliffhanger,
            themes=list(themes),
            chapter_id=chapter.chapter_id,
            entry_id=entry_id,
        )
