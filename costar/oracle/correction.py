"""
Name-correction collaborator.

Turns a misspelled actor name into the spelling the graph is likely to
know, using a chat model behind an OpenAI-compatible endpoint (an Ollama
gateway by default). The contract is best-effort: any failure returns
the original input unchanged so the resolver's "suggestion equals input"
fast path still holds.
"""

from __future__ import annotations

import logging
from typing import Protocol

from openai import AsyncOpenAI

from costar.core.config import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a Wikidata expert. Given an actor's name, reply with ONLY the "
    'exact name as it appears on Wikidata (format: "First Last" in English). '
    "No explanation, just the name."
)


class NameCorrector(Protocol):
    """Best-effort text transformer. Must never raise."""

    async def correct(self, name: str) -> str: ...


class PassthroughCorrector:
    """Used when correction is disabled: suggests the input itself."""

    async def correct(self, name: str) -> str:
        return name


class LLMNameCorrector:
    """
    Chat-completions backed corrector.

    Args:
        client: OpenAI-compatible async client
        model: Model name served by the endpoint
        temperature: Sampling temperature (kept low for stable spellings)
    """

    def __init__(
        self, client: AsyncOpenAI, model: str = "llama3:70b", temperature: float = 0.1
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> LLMNameCorrector:
        client = AsyncOpenAI(
            api_key=settings.corrector_api_key,
            base_url=settings.corrector_base_url,
            timeout=settings.corrector_timeout,
        )
        return cls(
            client,
            model=settings.corrector_model,
            temperature=settings.corrector_temperature,
        )

    async def correct(self, name: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f'What is the exact Wikidata name of this actor: "{name}"',
                    },
                ],
                temperature=self.temperature,
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            logger.warning(f"Name correction failed for '{name}': {e}")
            return name

        suggestion = content.strip().strip("\"'").strip()
        if not suggestion:
            return name
        logger.info(f"Name correction: '{name}' -> '{suggestion}'")
        return suggestion

    async def aclose(self) -> None:
        await self.client.close()
