"""Offline request data model and its typed payloads."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from config.exceptions import MissingPayloadError
from models.enums import RequestStatus, RequestType


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds (what the wire format keeps)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with a trailing 'Z', e.g. 2025-03-01T09:30:00Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# ---- Typed payloads ----

class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow", str_strip_whitespace=True)


class GenerateStoryPayload(_Payload):
    entry_id: str = Field(alias="entryId", min_length=1)
    genre: str = Field(min_length=1)
    user_id: Optional[str] = Field(default=None, alias="userId")


class SyncJournalEntryPayload(_Payload):
    entry_id: Optional[str] = Field(default=None, alias="entryId")


class ExportDataPayload(_Payload):
    format: str = "json"
    destination: Optional[str] = None


PAYLOAD_MODELS: dict[RequestType, type[_Payload]] = {
    RequestType.GENERATE_STORY: GenerateStoryPayload,
    RequestType.SYNC_JOURNAL_ENTRY: SyncJournalEntryPayload,
    RequestType.EXPORT_DATA: ExportDataPayload,
}


@dataclass
class OfflineRequest:
    """A unit of deferred work held by the offline queue."""
    type: RequestType
    data: dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    creation_date: datetime = field(default_factory=utc_now)
    attempt_count: int = 0
    status: RequestStatus = RequestStatus.PENDING
    error_message: Optional[str] = None

    # ---- Constructors ----

    @classmethod
    def generate_story(cls, entry_id: str, genre: str, user_id: Optional[str] = None) -> "OfflineRequest":
        data = {"entryId": entry_id, "genre": genre}
        if user_id:
            data["userId"] = user_id
        return cls(type=RequestType.GENERATE_STORY, data=data)

    @classmethod
    def sync_journal_entry(cls, entry_id: str) -> "OfflineRequest":
        return cls(type=RequestType.SYNC_JOURNAL_ENTRY, data={"entryId": entry_id})

    @classmethod
    def export_data(cls, format: str = "json", destination: Optional[str] = None) -> "OfflineRequest":
        data = {"format": format}
        if destination:
            data["destination"] = destination
        return cls(type=RequestType.EXPORT_DATA, data=data)

    # ---- Payload ----

    def payload(self) -> _Payload:
        """Validate ``data`` against the payload model for this request type.

        Raises:
            MissingPayloadError: If a required key is absent or blank.
        """
        model = PAYLOAD_MODELS[self.type]
        try:
            return model.model_validate(self.data)
        except PydanticValidationError as e:
            missing = []
            for err in e.errors():
                loc = err.get("loc") or ("?",)
                name = str(loc[0])
                field_info = model.model_fields.get(name)
                missing.append(field_info.alias if field_info and field_info.alias else name)
            raise MissingPayloadError(missing) from e

    # ---- Serialization ----

    def to_dict(self) -> dict:
        record = {
            "id": self.id,
            "type": self.type.value,
            "data": dict(self.data),
            "creationDate": format_timestamp(self.creation_date),
            "attemptCount": self.attempt_count,
            "status": self.status.value,
        }
        if self.error_message is not None:
            record["errorMessage"] = self.error_message
        return record

    @classmethod
    def from_dict(cls, record: dict) -> "OfflineRequest":
        """Build a request from its wire record.

        Raises:
            ValueError: If the record is not an object or a field has the wrong type.
            KeyError: If a required field is absent.
        """
        if not isinstance(record, dict):
            raise ValueError(f"request record must be an object, got {type(record).__name__}")
        created = record["creationDate"]
        if not isinstance(created, str):
            raise ValueError(f"creationDate must be a string, got {type(created).__name__}")
        data = record.get("data") or {}
        if not isinstance(data, dict):
            raise ValueError(f"request data must be an object, got {type(data).__name__}")
        return cls(
            id=str(record["id"]),
            type=RequestType(record["type"]),
            data={str(k): str(v) for k, v in data.items()},
            creation_date=parse_timestamp(created),
            attempt_count=int(record.get("attemptCount", 0)),
            status=RequestStatus(record.get("status", RequestStatus.PENDING.value)),
            error_message=record.get("errorMessage"),
        )

    def copy(self) -> "OfflineRequest":
        return replace(self, data=dict(self.data))
