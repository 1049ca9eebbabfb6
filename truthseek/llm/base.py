"""Base LLM wrapper around the OpenAI async client.

Any OpenAI-compatible API can be used by passing a different model name or
``base_url``. Defaults are read from ``settings`` but can be overridden
per-instance.
"""

from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from truthseek.utils.config import settings
from truthseek.utils.logger import get_logger

log = get_logger(__name__)


class BaseLLM:
    """Thin, model-agnostic wrapper around the OpenAI chat completions API."""

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
    ):
        self.model = model or settings.verdict_model
        self._client = AsyncOpenAI(api_key=api_key or settings.openai_api_key, base_url=base_url)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        **kwargs: Any,
    ) -> Optional[str]:
        """Send *messages* to the model and return the assistant reply text."""
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                **kwargs,
            )
            msg = resp.choices[0].message
            return msg.content if msg else None
        except Exception:
            log.exception("Completion failed for model %s", self.model)
            return None
