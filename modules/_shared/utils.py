# modules/_shared/utils.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

log = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Raised when a chat completion cannot be obtained."""


@dataclass
class OpenAIChat:
    """
    Thin facade over openai.chat.completions with:
      - model passed as a literal (e.g. "gpt-4o-mini")
      - API key read from `api_key_env` at call time
      - a single request per call; no retries
    """

    model: str
    temperature: float = 0.3
    max_tokens: int = 2000
    api_key_env: str = "OPENAI_API_KEY"

    def chat(self, user_msg: str, system_msg: str | None = None) -> str:
        from openai import OpenAI  # local import to keep tests light

        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise LLMError(f"{self.api_key_env} not set")

        messages = []
        if system_msg:
            messages.append({"role": "system", "content": system_msg})
        messages.append({"role": "user", "content": user_msg})

        log.debug("OpenAIChat.chat(model=%r, temperature=%s)", self.model, self.temperature)
        try:
            client = OpenAI(api_key=api_key)
            resp = client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            raise LLMError(f"OpenAI request failed: {e}") from e

        content = (resp.choices[0].message.content or "").strip()
        if not content:
            raise LLMError("OpenAI returned an empty message")
        log.debug("OpenAIChat.chat() received %d chars", len(content))
        return content
