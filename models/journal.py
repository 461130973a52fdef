"""Journal entry data model and the text composition fed to metadata extraction."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from models.request import format_timestamp, parse_timestamp, utc_now

NO_RESPONSE = "(No response)"


@dataclass
class PromptResponse:
    """A child's answer to one reflection prompt."""
    prompt: str
    selected_option: Optional[str] = None
    response: Optional[str] = None
    options: Optional[list[str]] = None

    @property
    def answer(self) -> str:
        """Selected option wins over free text; falls back to a placeholder."""
        if self.selected_option is not None:
            return self.selected_option
        if self.response is not None:
            return self.response
        return NO_RESPONSE

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "selectedOption": self.selected_option,
            "response": self.response,
            "options": self.options,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PromptResponse":
        return cls(
            prompt=data.get("prompt", ""),
            selected_option=data.get("selectedOption"),
            response=data.get("response"),
            options=data.get("options"),
        )


@dataclass
class JournalEntry:
    """A complete journal entry as far as story generation cares."""
    assignment_name: str
    subject: str
    id: str = field(default_factory=lambda: str(uuid4()))
    date: datetime = field(default_factory=utc_now)
    reflection_prompts: list[PromptResponse] = field(default_factory=list)
    transcription: Optional[str] = None
    ai_summary: Optional[str] = None
    emotional_state: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assignmentName": self.assignment_name,
            "subject": self.subject,
            "date": format_timestamp(self.date),
            "reflectionPrompts": [p.to_dict() for p in self.reflection_prompts],
            "transcription": self.transcription,
            "aiSummary": self.ai_summary,
            "emotionalState": self.emotional_state,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JournalEntry":
        return cls(
            id=data["id"],
            assignment_name=data.get("assignmentName", ""),
            subject=data.get("subject", ""),
            date=parse_timestamp(data["date"]) if data.get("date") else utc_now(),
            reflection_prompts=[
                PromptResponse.from_dict(p) for p in data.get("reflectionPrompts") or []
            ],
            transcription=data.get("transcription"),
            ai_summary=data.get("aiSummary"),
            emotional_state=data.get("emotionalState"),
        )


def compose_entry_text(entry: JournalEntry) -> str:
    """Flatten a journal entry into the text handed to metadata extraction.

    Order: transcription, assignment/subject, one line per prompt, summary.
    Sections are separated by a blank line.
    """
    parts: list[str] = []

    if entry.transcription is not None:
        parts.append(entry.transcription + "\n\n")

    parts.append(f"Assignment: {entry.assignment_name}\n")
    parts.append(f"Subject: {entry.subject}\n\n")

    for prompt_response in entry.reflection_prompts:
        parts.append(f"{prompt_response.prompt}: {prompt_response.answer}\n")

    if entry.ai_summary is not None:
        parts.append(f"\nSummary: {entry.ai_summary}")

    return "".join(parts)
