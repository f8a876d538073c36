"""
LLM providers and the order oracle built on them.
"""

from functools import lru_cache

from pedido_bot.config import settings
from pedido_bot.integrations.llm.base import BaseLLM, LLMResponse
from pedido_bot.integrations.llm.oracle import LLMOrderOracle, OracleEntities, OrderOracle


def get_llm_provider(provider: str | None = None) -> BaseLLM:
    """
    Build the provider named in settings (or the given one).

    Raises:
        ValueError: Unknown provider or missing credentials
    """
    provider = provider or settings.llm_provider

    if provider == "gigachat":
        # SDK is loaded only when the oracle is on
        from pedido_bot.integrations.llm.gigachat import GigaChatLLM

        return GigaChatLLM()
    raise ValueError(f"Unknown LLM provider: {provider}")


@lru_cache(maxsize=1)
def get_default_oracle() -> OrderOracle | None:
    """Oracle backed by the configured provider, or None when disabled."""
    if not settings.oracle_enabled:
        return None
    return LLMOrderOracle(get_llm_provider(), timeout=settings.oracle_timeout_seconds)


__all__ = [
    "BaseLLM",
    "LLMResponse",
    "LLMOrderOracle",
    "OracleEntities",
    "OrderOracle",
    "get_llm_provider",
    "get_default_oracle",
]
