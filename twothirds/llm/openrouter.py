"""OpenRouter API client used by LLM-driven players."""

import os
import re
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel

from ..engine.commitment import MAX_GUESS, MIN_GUESS

_NUMBER = re.compile(r"-?\d+")


class Message(BaseModel):
    """A chat message."""
    role: str
    content: str


def parse_guess(text: str) -> Optional[int]:
    """Pull the last in-range integer out of a model's answer.

    Models tend to reason first and state the number last, so the last
    match wins. Returns None if no usable number is present.
    """
    for token in reversed(_NUMBER.findall(text or "")):
        value = int(token)
        if MIN_GUESS <= value <= MAX_GUESS:
            return value
    return None


class OpenRouterClient:
    """Client for OpenRouter API (OpenAI-compatible)."""

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 60.0):
        """Initialize the OpenRouter client.

        Args:
            api_key: OpenRouter API key. If not provided, reads from OPENROUTER_API_KEY env var.
            timeout: Per-request timeout in seconds.
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenRouter API key required for llm players. Set OPENROUTER_API_KEY "
                "or pass api_key."
            )

        self.client = AsyncOpenAI(
            base_url=self.OPENROUTER_BASE_URL,
            api_key=self.api_key,
            timeout=timeout,
        )

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str = "anthropic/claude-sonnet-4",
        temperature: float = 0.7,
        max_tokens: int = 256,
    ) -> str:
        """Generate a response with system and user prompts.

        Returns:
            The assistant's response text.
        """
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_prompt),
        ]
        response = await self.client.chat.completions.create(
            model=model,
            messages=[m.model_dump() for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ""

    async def ask_guess(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float = 0.7,
    ) -> Optional[int]:
        """Ask a model for a guess and parse it. None if unparseable."""
        answer = await self.generate(system_prompt, user_prompt, model, temperature)
        return parse_guess(answer)
