"""Chapter generators: StoryMetadata + continuity -> the next ChapterResult.

Three backends share the ``ChapterGenerator`` protocol:

* ``RemoteChapterGenerator``: the narrative service's ``/api/generate-chapter``.
* ``AgentChapterGenerator``: Claude through the Agent SDK.
* ``TemplateChapterGenerator``: offline per-genre templates.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from agents.base_agent import BaseAgent
from config.exceptions import LLMResponseParseError
from config.settings import Settings
from models.enums import STORY_GENRES
from models.story import ChapterResult, StoryMetadata
from tools.agent_sdk_client import AgentSDKClient
from tools.narrative_api import ChapterGenerationRequest, MetadataPayload, NarrativeAPIClient

logger = logging.getLogger(__name__)


class ChapterGenerator(Protocol):
    async def generate(
        self,
        metadata: StoryMetadata,
        user_id: str,
        genre: str,
        previous_arcs: list[str],
    ) -> ChapterResult:
        ...


class RemoteChapterGenerator:
    """Chapters from ``POST /api/generate-chapter``."""

    def __init__(self, api: NarrativeAPIClient):
        self.api = api

    async def generate(
        self,
        metadata: StoryMetadata,
        user_id: str,
        genre: str,
        previous_arcs: list[str],
    ) -> ChapterResult:
        request = ChapterGenerationRequest(
            metadata=MetadataPayload.model_validate(metadata.to_api_dict()),
            user_id=user_id,
            genre=genre,
            previous_arcs=list(previous_arcs) or None,
        )
        response = await self.api.generate_chapter(request)
        kwargs = {}
        if response.chapter_id:
            kwargs["chapter_id"] = response.chapter_id
        return ChapterResult(
            text=response.text,
            cliffhanger=response.cliffhanger,
            student_name=response.student_name,
            feedback=response.feedback,
            **kwargs,
        )


class AgentChapterGenerator(BaseAgent):
    """Writes chapters with Claude using ``config/prompts/chapter_writer.md``."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(llm_client, settings)
        self._template = self._load_prompt("chapter_writer")

    def build_prompts(
        self,
        metadata: StoryMetadata,
        genre: str,
        previous_arcs: list[str],
    ) -> tuple[str, str]:
        """Return (system_prompt, user_prompt) for one chapter."""
        system_prompt = self._extract_section(self._template, "System Prompt")

        if metadata.sentiment_score is None:
            sentiment = "unknown"
        else:
            sentiment = f"{metadata.sentiment_label()} ({metadata.sentiment_score:.2f})"
        if previous_arcs:
            history = "\n\n".join(
                f"{i}. {arc}" for i, arc in enumerate(previous_arcs, start=1)
            )
        else:
            history = "(none, this is the first chapter)"

        user_prompt = self._extract_section(self._template, "User Prompt").format(
            genre=STORY_GENRES.get(genre, genre),
            sentiment=sentiment,
            themes=", ".join(metadata.themes or []) or "(none)",
            entities=", ".join(metadata.entities or []) or "(none)",
            previous_arcs=history,
        )
        return system_prompt, user_prompt

    async def generate(
        self,
        metadata: StoryMetadata,
        user_id: str,
        genre: str,
        previous_arcs: list[str],
    ) -> ChapterResult:
        system_prompt, user_prompt = self.build_prompts(metadata, genre, previous_arcs)
        logger.info(
            "Writing %s chapter for %s (%d previous arcs)", genre, user_id, len(previous_arcs)
        )

        data = await self.llm.chat_json(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=self.settings.llm_model_story,
        )

        text = str(data.get("text") or "").strip()
        if not text:
            raise LLMResponseParseError(
                "Model reply has no chapter text",
                raw_response=json.dumps(data, ensure_ascii=False),
            )
        return ChapterResult(
            text=text,
            cliffhanger=str(data.get("cliffhanger") or "").strip(),
            feedback=data.get("feedback") or None,
            title=data.get("title") or None,
        )


# ---- Offline templates ----

@dataclass(frozen=True)
class GenreTemplate:
    """Sentence pieces for one genre.

    Format keys: ``{themes}`` (comma-joined), ``{themes_and}`` (joined with
    "and"), ``{first_theme}`` and ``{entity}`` (first name found).
    """
    opening: str
    cliffhanger: str
    theme_line: str = ""
    theme_fallback: str = ""
    entity_line: str = ""
    entity_fallback: str = ""
    entity_first: bool = False
    moods: tuple[str, str, str] = ("", "", "")  # (positive, negative, calm)
    mood_threshold: float = 0.3
    closing: str = ""


GENRE_TEMPLATES: dict[str, GenreTemplate] = {
    "Fantasy": GenreTemplate(
        opening="In a realm of magic and wonder, ",
        theme_line="our story unfolds around themes of {themes}. ",
        moods=(
            "A joyous energy filled the air. ",
            "A shadow of doubt crept in. ",
            "The atmosphere was calm and thoughtful. ",
        ),
        closing="And so, the adventure began.",
        cliffhanger="But a mysterious figure watched from the shadows...",
    ),
    "Adventure": GenreTemplate(
        opening="The call to adventure was strong! ",
        entity_first=True,
        entity_line="Our hero, perhaps named {entity}, set out to explore ",
        entity_fallback="A brave soul set out to explore ",
        theme_line="the secrets of {first_theme}. ",
        theme_fallback="uncharted territories. ",
        cliffhanger="What dangers awaited around the next bend?",
    ),
    "Mystery": GenreTemplate(
        opening="A puzzling event had just occurred. ",
        theme_line="Clues related to {themes_and} were scattered about. ",
        entity_line="Was {entity} involved? ",
        closing="The air was thick with unanswered questions.",
        cliffhanger="The biggest clue was yet to be discovered.",
    ),
    "Sci-Fi": GenreTemplate(
        opening="In the distant future, or perhaps a galaxy far away, ",
        theme_line="humanity (or what was left of it) grappled with {themes}. ",
        moods=(
            "A beacon of hope shone through the cosmos. ",
            "A sense of cosmic dread loomed. ",
            "The vastness of space offered a moment of clarity. ",
        ),
        closing="A new journey through the stars was about to begin.",
        cliffhanger="But an unknown signal echoed from the void...",
    ),
    "Romance": GenreTemplate(
        opening="It was an ordinary day, but something felt different. ",
        theme_line="Thoughts about {themes_and} lingered. ",
        entity_line="Somehow, {entity} kept coming to mind. ",
        moods=(
            "A feeling of happiness blossomed. ",
            "A touch of melancholy was present. ",
            "It was a moment of quiet reflection. ",
        ),
        mood_threshold=0.5,
        cliffhanger="How would this day truly unfold?",
    ),
    "Historical": GenreTemplate(
        opening="Long ago, in a town where every street had a story, ",
        theme_line="people spoke in hushed voices about {themes}. ",
        entity_line="Among them was {entity}, whose name would be remembered. ",
        moods=(
            "Bells rang out in celebration. ",
            "Hard times had settled over the rooftops. ",
            "Life went on at its steady, patient pace. ",
        ),
        cliffhanger="But a letter sealed with wax was about to change everything...",
    ),
    "Thriller": GenreTemplate(
        opening="The clock was ticking. ",
        theme_line="Everything hinged on {first_theme}. ",
        entity_line="Only {entity} knew the whole truth. ",
        moods=(
            "For a moment, it looked like they might win. ",
            "Danger pressed in from every side. ",
            "It was quiet. Too quiet. ",
        ),
        closing="There was no time to waste.",
        cliffhanger="Then the lights went out.",
    ),
    "Comedy": GenreTemplate(
        opening="Nobody could have predicted what happened next. ",
        theme_line="It all started with {themes_and}, which is never a good sign. ",
        entity_line="{entity} tried very hard to look like this was the plan. ",
        moods=(
            "Everyone laughed until their sides hurt. ",
            "It was a disaster, but a very funny one. ",
            "Somehow, things were almost normal. ",
        ),
        cliffhanger="And that was before anyone found the goat.",
    ),
    "Educational": GenreTemplate(
        opening="Every question leads to a discovery. ",
        theme_line="Today's discoveries were about {themes}. ",
        entity_line="With help from {entity}, the puzzle started to make sense. ",
        moods=(
            "Learning something new felt wonderful. ",
            "It was tricky, but mistakes are how we learn. ",
            "Step by step, the ideas came together. ",
        ),
        closing="There was still so much more to find out.",
        cliffhanger="What would the next experiment reveal?",
    ),
    "Sports": GenreTemplate(
        opening="The whistle blew and the game was on! ",
        entity_first=True,
        entity_line="{entity} took a deep breath and stepped forward. ",
        entity_fallback="Our player took a deep breath and stepped forward. ",
        theme_line="Everything they had practiced about {themes_and} came down to this. ",
        moods=(
            "The crowd roared with excitement. ",
            "The score was not looking good. ",
            "Focus. Breathe. Play. ",
        ),
        cliffhanger="With seconds left on the clock, the ball was in the air...",
    ),
}

DEFAULT_TEMPLATE = GENRE_TEMPLATES["Fantasy"]


class TemplateChapterGenerator:
    """Offline chapters assembled from per-genre sentence templates.

    The result depends only on the metadata and genre, so the same entry
    always produces the same chapter text.
    """

    def __init__(self, templates: Optional[dict[str, GenreTemplate]] = None):
        self.templates = templates or GENRE_TEMPLATES

    def render(self, metadata: StoryMetadata, genre: str) -> tuple[str, str]:
        """Return (chapter_text, cliffhanger)."""
        template = self.templates.get(genre)
        if template is None:
            logger.warning("No template for genre %r; using Fantasy", genre)
            template = DEFAULT_TEMPLATE

        themes = metadata.themes or []
        entities = metadata.entities or []
        fields = {
            "themes": ", ".join(themes),
            "themes_and": " and ".join(themes),
            "first_theme": themes[0] if themes else "",
            "entity": entities[0] if entities else "",
        }

        theme_part = template.theme_line if themes else template.theme_fallback
        entity_part = template.entity_line if entities else template.entity_fallback
        parts = [template.opening]
        if template.entity_first:
            parts += [entity_part, theme_part]
        else:
            parts += [theme_part, entity_part]

        score = metadata.sentiment_score
        positive, negative, calm = template.moods
        if score is not None:
            if score > template.mood_threshold:
                parts.append(positive)
            elif score < -template.mood_threshold:
                parts.append(negative)
            else:
                parts.append(calm)
        parts.append(template.closing)

        text = "".join(p.format(**fields) for p in parts if p).strip()
        key_phrases = metadata.key_phrases or []
        if key_phrases and key_phrases[0] not in text:
            text += f" The essence of '{key_phrases[0]}' was palpable."
        return text, template.cliffhanger

    async def generate(
        self,
        metadata: StoryMetadata,
        user_id: str,
        genre: str,
        previous_arcs: list[str],
    ) -> ChapterResult:
        text, cliffhanger = self.render(metadata, genre)
        logger.info("Template chapter for %s (%s, %d chars)", user_id, genre, len(text))
        return ChapterResult(text=text, cliffhanger=cliffhanger)
