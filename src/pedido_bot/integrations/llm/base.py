"""
Completion interface the order oracle talks to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LLMResponse:
    """Text returned by a provider."""

    content: str
    tokens_used: int | None = None
    model: str | None = None


class BaseLLM(ABC):
    """A chat model that answers one prompt at a time."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 400,
    ) -> LLMResponse:
        """
        Single-turn completion.

        Oracle prompts expect short JSON answers, hence the low defaults.
        Transport errors propagate; the oracle turns them into OracleError.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name used in log and error messages."""
