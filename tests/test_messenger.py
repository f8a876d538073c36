"""
Tests for Telegram delivery.
"""

import pytest

from pedido_bot.bot.messenger import TelegramMessenger
from pedido_bot.core.conversation.messages import ChoiceMessage, ChoiceOption, TextMessage

pytestmark = pytest.mark.unit


class FakeBot:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[dict] = []

    async def send_message(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)


class TestTelegramMessenger:
    async def test_text(self):
        bot = FakeBot()
        await TelegramMessenger(bot).send("7", TextMessage("hola"))
        assert bot.calls == [{"chat_id": 7, "text": "hola"}]

    async def test_choice_has_keyboard(self):
        bot = FakeBot()
        message = ChoiceMessage.build("¿Cuál?", [ChoiceOption(id="a", title="A")])

        await TelegramMessenger(bot).send("7", message)
        assert bot.calls[0]["reply_markup"] is not None

    async def test_oversized_choice_id_sent_as_text(self):
        bot = FakeBot()
        message = ChoiceMessage.build(
            "¿Cuál?", [ChoiceOption(id="order:product:" + "A" * 60, title="Producto A")]
        )

        await TelegramMessenger(bot).send("7", message)

        assert bot.calls[0]["reply_markup"] is None
        assert bot.calls[0]["text"] == "¿Cuál?\n\n1. Producto A"

    async def test_unexpected_error_is_logged(self, caplog):
        bot = FakeBot(error=RuntimeError("socket closed"))

        await TelegramMessenger(bot).send("7", TextMessage("hola"))

        assert "socket closed" in caplog.text
