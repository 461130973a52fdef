"""HTTP client for the remote narrative service (metadata + chapter generation).

Both endpoints take and return JSON:

* ``POST /api/metadata``          ``{"text"}`` -> ``{sentiment, themes, entities, keyPhrases}``
* ``POST /api/generate-chapter``  ``{metadata, userId, genre, previousArcs?}``
                                  -> ``{chapterId, text, cliffhanger, studentName?, feedback?}``

Transport errors and 5xx answers are retried with exponential backoff;
successful answers are cached for ``api_cache_ttl_seconds``.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from config.exceptions import (
    ServiceHTTPError,
    ServiceResponseError,
    ServiceTimeoutError,
    TransientServiceError,
)
from config.settings import Settings
from tools.response_cache import ResponseCache, cache_key

logger = logging.getLogger(__name__)

METADATA_PATH = "/api/metadata"
GENERATE_CHAPTER_PATH = "/api/generate-chapter"


class MetadataPayload(BaseModel):
    """Metadata as the service speaks it: sentiment is a string."""

    model_config = ConfigDict(populate_by_name=True)

    sentiment: Optional[str] = None
    themes: list[str] = Field(default_factory=list)
    entities: list[str] = Field(default_factory=list)
    key_phrases: list[str] = Field(default_factory=list, alias="keyPhrases")

    @field_validator("sentiment", mode="before")
    @classmethod
    def coerce_sentiment(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        raise ValueError("sentiment must be a string or number")

    @field_validator("themes", "entities", "key_phrases", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ChapterGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    metadata: MetadataPayload
    user_id: str = Field(alias="userId")
    genre: str
    student_name: Optional[str] = Field(default=None, alias="studentName")
    previous_arcs: Optional[list[str]] = Field(default=None, alias="previousArcs")

    def to_body(self) -> dict:
        """Wire body; ``previousArcs`` is left out when there is no history."""
        body = self.model_dump(by_alias=True, exclude_none=True)
        if not body.get("previousArcs"):
            body.pop("previousArcs", None)
        return body


class ChapterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    chapter_id: str = Field(default="", alias="chapterId")
    text: str
    cliffhanger: str = ""
    student_name: Optional[str] = Field(default=None, alias="studentName")
    feedback: Optional[str] = None


def _is_retryable(exc: BaseException) -> bool:
    """Retry transport failures and 5xx; never 4xx or undecodable bodies."""
    if isinstance(exc, ServiceHTTPError):
        return exc.status_code >= 500
    if isinstance(exc, ServiceResponseError):
        return False
    return isinstance(exc, TransientServiceError)


class NarrativeAPIClient:
    """Async client for the narrative service.

    Args:
        settings: Base URL, API key, timeouts, retry counts and cache TTL.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
        wait: Backoff strategy between retries.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wait: Optional[wait_base] = None,
    ):
        self.settings = settings or Settings()
        self.cache = ResponseCache(self.settings.api_cache_ttl_seconds)
        self._transport = transport
        self._wait = wait or wait_exponential(multiplier=0.5, min=0.5, max=8)
        self._client: Optional[httpx.AsyncClient] = None
        self.total_requests = 0

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.settings.narrative_api_key:
            headers["x-api-key"] = self.settings.narrative_api_key
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.narrative_api_base_url,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NarrativeAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ---- Endpoints ----

    async def fetch_metadata(self, text: str) -> MetadataPayload:
        """Ask the service to analyse journal text."""
        body = {"text": text}
        key = cache_key("metadata", body)
        cached = await self.cache.get_model(key, MetadataPayload)
        if cached is not None:
            logger.info("Using cached metadata (%s)", key[:20])
            return cached

        data = await self._post_with_retry(
            METADATA_PATH,
            body,
            timeout=self.settings.api_timeout_seconds,
            retries=self.settings.metadata_api_retries,
        )
        result = self._decode(MetadataPayload, data)
        await self.cache.set_model(key, result)
        return result

    async def generate_chapter(self, request: ChapterGenerationRequest) -> ChapterResponse:
        """Ask the service for the next chapter."""
        body = request.to_body()
        key = cache_key("chapter", body)
        cached = await self.cache.get_model(key, ChapterResponse)
        if cached is not None:
            logger.info("Using cached chapter (%s)", key[:20])
            return cached

        data = await self._post_with_retry(
            GENERATE_CHAPTER_PATH,
            body,
            timeout=self.settings.api_timeout_seconds * 2,
            retries=self.settings.chapter_api_retries,
        )
        result = self._decode(ChapterResponse, data)
        await self.cache.set_model(key, result)
        return result

    # ---- Transport ----

    async def _post_with_retry(self, path: str, body: dict, timeout: float, retries: int) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(retries + 1),
            wait=self._wait,
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying %s (attempt %d/%d)",
                        path, attempt.retry_state.attempt_number, retries + 1,
                    )
                return await self._post(path, body, timeout)

    async def _post(self, path: str, body: dict, timeout: float) -> Any:
        self.total_requests += 1
        client = self._get_client()
        logger.debug("POST %s (timeout=%.0fs)", path, timeout)
        try:
            response = await client.post(path, json=body, timeout=timeout)
        except httpx.TimeoutException as e:
            logger.warning("POST %s timed out after %.0fs", path, timeout)
            raise ServiceTimeoutError(
                "The request timed out", {"path": path, "timeout": timeout}
            ) from e
        except httpx.RequestError as e:
            logger.error("POST %s failed: %s", path, e)
            raise TransientServiceError(
                f"Network request failed: {e}", {"path": path}
            ) from e

        if not 200 <= response.status_code < 300:
            logger.warning("POST %s returned %d", path, response.status_code)
            raise ServiceHTTPError(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceResponseError(raw_response=response.text) from e
        logger.info("POST %s -> %d", path, response.status_code)
        return data

    @staticmethod
    def _decode(model: type[BaseModel], data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ServiceResponseError(
                f"Failed to decode the server response: {e.error_count()} invalid field(s)",
                raw_response=str(data),
            ) from e
