"""OpenAI chat-completions wrapper: one prompt in, free text out."""

from __future__ import annotations

import logging
from typing import Any, Optional

import openai

from gamepulse.llm.prompts import SYSTEM_PROMPT
from gamepulse.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Transient failures only; a 4xx other than 429 will fail the same way again.
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class IdeaModel:
    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        max_retries: int = 3,
        temperature: float = 0.8,
        client: Optional[Any] = None,
    ):
        self.model = model
        self.max_retries = max_retries
        self.temperature = temperature
        # Retries are ours (logged, with backoff), not the SDK's.
        self.client = client or openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, prompt: str) -> str:
        """Return the model's raw text for `prompt`. Re-issuing the prompt is idempotent."""
        call = retry_with_backoff(max_retries=self.max_retries, retry_on=RETRYABLE_ERRORS)(self._complete)
        return call(prompt)

    def _complete(self, prompt: str) -> str:
        logger.info(f"Requesting ideas from {self.model} (prompt {len(prompt)} chars)")
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return choices[0].message.content or ""
