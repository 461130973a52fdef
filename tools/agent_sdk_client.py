"""Claude Agent SDK wrapper used by the agent chapter backend."""

import asyncio
import logging
import os
from typing import Callable, Optional

from claude_agent_sdk import (
    query,
    ClaudeAgentOptions,
    ResultMessage,
    AssistantMessage,
)

from config.settings import Settings
from config.exceptions import LLMError, LLMTimeoutError, LLMResponseParseError
from tools.llm_client import parse_json_response

logger = logging.getLogger(__name__)

# The SDK refuses to start while this is set (nested CLI sessions).
os.environ.pop("CLAUDECODE", None)


class AgentSDKClient:
    """Thin async wrapper around ``claude_agent_sdk.query()``.

    Authentication is handled by the Claude Code CLI the SDK launches.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.total_calls = 0

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        on_event: Optional[Callable[[dict], None]] = None,
    ) -> str:
        """Send a single-turn request and return the text result.

        Args:
            system_prompt: System message guiding the model's behavior.
            user_prompt: User message content.
            model: Model name override. Defaults to the story model.
            timeout: Seconds to wait for the whole exchange. Defaults to
                twice the API timeout, matching the remote chapter backend.
            on_event: Optional callback fired with {"type": "text"} on the
                first text chunk and {"type": "result"} when done.

        Raises:
            LLMTimeoutError: If the exchange exceeds ``timeout``.
            LLMError: If the query fails.
        """
        model = model or self.settings.llm_model_story
        timeout = timeout or self.settings.api_timeout_seconds * 2
        self.total_calls += 1

        logger.info("AgentSDK call: model=%s, timeout=%.0fs", model, timeout)
        try:
            result_text = await asyncio.wait_for(
                self._collect(system_prompt, user_prompt, model, on_event), timeout
            )
        except asyncio.TimeoutError as e:
            raise LLMTimeoutError(
                f"Agent SDK query timed out after {timeout:g} seconds", {"model": model}
            ) from e
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"Agent SDK query failed: {e}", {"model": model}) from e

        if not result_text:
            logger.warning("AgentSDK returned no content")
        return result_text

    async def _collect(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        on_event: Optional[Callable[[dict], None]],
    ) -> str:
        result_text = ""
        text_fired = False
        # Exhaust the generator: leaving the loop early trips the SDK's
        # anyio cancel scopes ("exit cancel scope in a different task").
        async for message in query(
            prompt=user_prompt,
            options=ClaudeAgentOptions(
                system_prompt=system_prompt, model=model, max_turns=1
            ),
        ):
            if isinstance(message, ResultMessage):
                result_text = message.result or result_text
                logger.info(
                    "AgentSDK result: %d chars, cost=$%s",
                    len(result_text),
                    message.total_cost_usd,
                )
                if on_event:
                    on_event({"type": "result"})
            elif isinstance(message, AssistantMessage):
                for block in message.content:
                    text = getattr(block, "text", None)
                    if not text:
                        continue
                    if on_event and not text_fired:
                        text_fired = True
                        on_event({"type": "text", "text": text})
                    if not result_text:
                        result_text = text
        return result_text

    async def chat_json(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict:
        """Send a request and parse the reply as a JSON object.

        Raises:
            LLMResponseParseError: If the reply holds no JSON object.
        """
        text = await self.chat(system_prompt, user_prompt, model, timeout)
        try:
            return parse_json_response(text)
        except ValueError as e:
            raise LLMResponseParseError(str(e), raw_response=text) from e

    def get_usage_summary(self) -> dict:
        return {"total_calls": self.total_calls}
