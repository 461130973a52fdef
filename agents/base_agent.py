"""Base class for LLM-backed agents: client wiring and prompt templates."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from config.settings import Settings
from tools.agent_sdk_client import AgentSDKClient

logger = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).parent.parent / "config" / "prompts"


@lru_cache(maxsize=16)
def _read_prompt_file(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


class BaseAgent:
    """Holds the settings and the Agent SDK client shared by LLM agents."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.llm = llm_client or AgentSDKClient(self.settings)

    def _load_prompt(self, template_name: str) -> str:
        """Load ``config/prompts/<template_name>.md`` (cached after first read).

        Raises:
            FileNotFoundError: If the template does not exist.
        """
        path = _PROMPTS_DIR / f"{template_name}.md"
        if not path.exists():
            raise FileNotFoundError(f"Prompt template not found: {path}")
        return _read_prompt_file(str(path))

    @staticmethod
    def _extract_section(template: str, section_header: str) -> str:
        """Body of the ``## <section_header>`` section of a markdown template."""
        capturing = False
        result = []
        for line in template.split("\n"):
            if line.strip().startswith("## "):
                if capturing:
                    break
                capturing = section_header in line
                continue
            if capturing:
                result.append(line)
        return "\n".join(result).strip()
