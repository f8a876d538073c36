"""
GigaChat provider for the order oracle.
"""

import logging

from gigachat import GigaChat
from gigachat.models import Chat, Messages, MessagesRole

from pedido_bot.config import settings
from pedido_bot.integrations.llm.base import BaseLLM, LLMResponse

logger = logging.getLogger(__name__)


class GigaChatLLM(BaseLLM):
    """Sber GigaChat over its async client."""

    def __init__(
        self,
        credentials: str | None = None,
        scope: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.credentials = credentials or settings.gigachat_credentials
        self.scope = scope or settings.gigachat_scope
        self.model = model or settings.gigachat_model
        self.timeout = timeout or settings.oracle_timeout_seconds

        if not self.credentials:
            raise ValueError(
                "GigaChat credentials not provided. "
                "Set GIGACHAT_CREDENTIALS or disable the oracle with ORACLE_ENABLED=false."
            )

    def _get_client(self) -> GigaChat:
        return GigaChat(
            credentials=self.credentials,
            scope=self.scope,
            model=self.model,
            timeout=self.timeout,
            verify_ssl_certs=settings.gigachat_verify_ssl,
        )

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 400,
    ) -> LLMResponse:
        messages = []
        if system_prompt:
            messages.append(Messages(role=MessagesRole.SYSTEM, content=system_prompt))
        messages.append(Messages(role=MessagesRole.USER, content=prompt))

        # GigaChat rejects a zero temperature
        chat = Chat(messages=messages, temperature=max(temperature, 0.01), max_tokens=max_tokens)

        async with self._get_client() as client:
            response = await client.achat(chat)

        usage = response.usage.total_tokens if response.usage else None
        logger.debug(f"GigaChat {response.model} answered ({usage} tokens)")
        return LLMResponse(
            content=response.choices[0].message.content,
            tokens_used=usage,
            model=response.model,
        )

    @property
    def name(self) -> str:
        return "gigachat"
