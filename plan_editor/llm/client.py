"""Text generator adapters for the plan-editing assistant.

Security: Reads API key from settings/environment only, never hardcoded.
Provides a deterministic stub when no key is present for testing.
"""

import logging
from typing import Protocol

from openai import AsyncOpenAI

from plan_editor.config import Settings, get_settings
from plan_editor.models.changes import Message

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Protocol for text generator implementations."""

    async def generate(self, history: list[Message]) -> str:
        """Produce the assistant's next reply.

        Args:
            history: Conversation so far, oldest first, ending with the user turn

        Returns:
            Raw reply text; may contain action blocks and is not trusted
        """
        ...


class DeterministicStubGenerator:
    """Deterministic stub generator for testing (no API key required)."""

    def __init__(self, reply: str | None = None) -> None:
        self._reply = reply

    async def generate(self, history: list[Message]) -> str:
        """Return the configured reply, or a canned acknowledgement."""
        if self._reply is not None:
            return self._reply
        last = history[-1].content if history else ""
        return f"I can't edit your plan right now, but I noted your request: {last}"


class OpenAIGenerator:
    """OpenAI-backed text generator (works with OpenAI-compatible endpoints)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        """Initialize OpenAI generator.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use
            base_url: Optional endpoint for OpenAI-compatible providers
            system_prompt: Optional host-supplied system prompt
            temperature: Sampling temperature
            max_tokens: Reply token limit
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, history: list[Message]) -> str:
        """Generate the next reply using the chat completions API."""
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.extend({"role": m.role.value, "content": m.content} for m in history)

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        content = response.choices[0].message.content or ""
        if not content.strip():
            logger.warning("Text generator returned an empty reply")
        return content


def get_text_generator(
    settings: Settings | None = None, system_prompt: str | None = None
) -> TextGenerator:
    """Factory function to get appropriate generator based on config.

    Returns:
        OpenAIGenerator if API key is configured, DeterministicStubGenerator otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI text generator")
        return OpenAIGenerator(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            system_prompt=system_prompt,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
    else:
        logger.warning("No OpenAI API key configured, using deterministic stub generator")
        return DeterministicStubGenerator()
