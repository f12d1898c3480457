"""OpenAI adapter — implements the LlmGateway port.

The pipeline calls this adapter three ways: per-file and per-chunk signal
extraction (JSON mode, low temperature), the repository summary (JSON mode)
and the README draft (plain markdown).  Every provider failure surfaces as
:class:`LlmError`; callers decide whether that means "skip this file" or
"use the heuristic fallback".
"""

from __future__ import annotations

import logging
from typing import Any

from openai import (
    APIConnectionError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from readme_forge.domain.exceptions import LlmError

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """Concrete ``LlmGateway`` backed by the OpenAI chat-completions API.

    Parameters
    ----------
    api_key:
        Secret key for the provider.
    model:
        Chat model used for every call.
    base_url:
        Optional OpenAI-compatible endpoint; ``None`` uses the public API.
    max_retries:
        Retries the SDK performs on transient errors before we see them.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        max_retries: int = 3,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=max_retries)
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool = True,
        temperature: float = 0.2,
    ) -> str:
        """Send a system + user prompt and return the completion text."""
        request = self._build_request(system_prompt, user_prompt, json_mode, temperature)
        try:
            response = await self._client.chat.completions.create(**request)
        except AuthenticationError as exc:
            raise LlmError(
                "Invalid OpenAI API key. "
                "Set a valid key in the OPENAI_API_KEY environment variable."
            ) from exc
        except RateLimitError as exc:
            logger.error("OpenAI rate limit / quota error: %s", exc)
            raise LlmError(f"OpenAI rate limit / quota error: {exc}") from exc
        except (APITimeoutError, APIConnectionError) as exc:
            logger.warning("OpenAI unreachable: %s", exc)
            raise LlmError(f"Could not reach the generation service: {exc}") from exc
        except Exception as exc:
            raise LlmError(f"LLM call failed: {exc}") from exc

        if not response.choices or not response.choices[0].message.content:
            raise LlmError("LLM returned an empty response.")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                "OpenAI usage: %s prompt + %s completion tokens",
                usage.prompt_tokens,
                usage.completion_tokens,
            )
        return response.choices[0].message.content

    def _build_request(
        self, system_prompt: str, user_prompt: str, json_mode: bool, temperature: float
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}
        return request

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.close()
