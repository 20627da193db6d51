"""Port: the language model behind the oracle client."""

from __future__ import annotations

from typing import Protocol


class LlmGateway(Protocol):
    """Raw text completion.

    Implementations raise :class:`~project_reviewer.domain.exceptions.LlmError`
    on any transport, quota or empty-response failure.  Parsing and fallback
    handling belong to the oracle client, not to the gateway.
    """

    async def complete(
        self, system_prompt: str, user_prompt: str, *, json_mode: bool = True
    ) -> str:
        """Return the completion text; *json_mode* asks for a bare JSON object."""
        ...
