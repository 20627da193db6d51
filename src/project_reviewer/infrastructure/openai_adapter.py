"""OpenAI chat-completions adapter for the LlmGateway port."""

from __future__ import annotations

import logging

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from project_reviewer.domain.exceptions import LlmError

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """Sends one system + user message pair per call at a fixed temperature.

    Works against any OpenAI-compatible endpoint when *base_url* is given.
    Retries are left to the SDK; whatever still fails surfaces as
    :class:`LlmError`.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        timeout: float = 120.0,
        max_retries: int = 3,
        temperature: float = 0.0,
    ) -> None:
        self._client = AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=max_retries
        )
        self._model = model
        self._temperature = temperature

    async def complete(
        self, system_prompt: str, user_prompt: str, *, json_mode: bool = True
    ) -> str:
        request: dict[str, object] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._temperature,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**request)  # type: ignore[arg-type]
        except AuthenticationError as exc:
            raise LlmError(
                "OpenAI rejected the API key; set OPENAI_API_KEY to a valid key."
            ) from exc
        except RateLimitError as exc:
            logger.error("OpenAI rate limit / quota exhausted: %s", exc)
            raise LlmError(f"OpenAI rate limit / quota error: {exc}") from exc
        except APITimeoutError as exc:
            raise LlmError(f"OpenAI request timed out after retries ({self._model})") from exc
        except APIConnectionError as exc:
            raise LlmError(f"Cannot reach the OpenAI endpoint: {exc}") from exc
        except APIStatusError as exc:
            raise LlmError(f"OpenAI returned HTTP {exc.status_code}: {exc.message}") from exc

        if not response.choices:
            raise LlmError("OpenAI returned no choices.")
        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning("Completion hit the token limit; output is truncated")
        if response.usage is not None:
            logger.debug(
                "Tokens used: prompt=%d completion=%d",
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )

        content = choice.message.content
        if not content:
            raise LlmError("OpenAI returned an empty completion.")
        return content

    async def close(self) -> None:
        await self._client.close()
