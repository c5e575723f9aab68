"""
LLM Gateway — Wraps the Groq client with retry, timeout, and token tracking.

A key passed per call (from the X-LLM-API-Key header) takes precedence over
the configured GROQ_API_KEY.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from groq import Groq

from app.config import settings

logger = logging.getLogger("fairaudit.llm")


class MissingAPIKeyError(RuntimeError):
    """Neither the request nor the settings supplied a provider key."""


class LLMGateway:
    """
    Groq LLM client wrapper with:
    - Configurable timeout
    - Retry with exponential backoff
    - Token usage tracking
    """

    provider = "groq"

    def __init__(self) -> None:
        self.default_api_key = settings.groq_api_key
        self.model = settings.fairaudit_model
        self.timeout = settings.llm_timeout
        self.max_retries = settings.llm_max_retries
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.total_tokens_used = 0

    def resolve_api_key(self, api_key: Optional[str] = None) -> str:
        key = api_key or self.default_api_key
        if not key:
            raise MissingAPIKeyError("Missing API key")
        return key

    async def complete(self, system_prompt: str, user_prompt: str, api_key: Optional[str] = None) -> dict[str, Any]:
        """
        Send a system + user prompt pair and return the completion text.

        Runs the synchronous Groq SDK in a thread pool to avoid blocking
        the async event loop. Raises MissingAPIKeyError before any network
        call when no key is available; provider failures are retried and
        then reported in the result, never raised.

        Returns:
            dict with 'content' (text), 'tokens_used' (int), 'success' (bool)
            and 'error' (str) on failure.
        """
        client = Groq(api_key=self.resolve_api_key(api_key), timeout=self.timeout)
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.to_thread(
                    self._sync_complete, client, system_prompt, user_prompt
                )

                content = response.choices[0].message.content or ""
                tokens = getattr(response.usage, "total_tokens", 0) if response.usage else 0
                self.total_tokens_used += tokens

                return {
                    "content": content,
                    "tokens_used": tokens,
                    "success": bool(content),
                }

            except Exception as e:
                last_error = e
                logger.warning(
                    f"LLM attempt {attempt + 1}/{self.max_retries} failed: {e}"
                )
                if attempt < self.max_retries - 1:
                    # Exponential backoff: 1s, 2s, 4s
                    await asyncio.sleep(2**attempt)

        logger.error(f"LLM gateway exhausted retries. Last error: {last_error}")
        return {
            "content": "",
            "tokens_used": 0,
            "success": False,
            "error": str(last_error),
        }

    def _sync_complete(self, client: Groq, system_prompt: str, user_prompt: str):
        """Synchronous Groq completion call."""
        return client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    def get_tokens_used(self) -> int:
        """Get total tokens consumed across all calls."""
        return self.total_tokens_used

    def reset_token_counter(self) -> None:
        self.total_tokens_used = 0
