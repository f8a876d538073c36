"""
Tests for the Telegram message handlers, called with stand-in messages.
"""

from types import SimpleNamespace

import pytest

from pedido_bot.bot.handlers.conversation import handle_text, handle_unsupported
from pedido_bot.core.conversation import replies

pytestmark = pytest.mark.unit


class FakeBot:
    def __init__(self):
        self.actions: list[str] = []

    async def send_chat_action(self, chat_id, action):
        self.actions.append(action)


class FakeMessage:
    def __init__(self, text=None, content_type="text", user_id=7):
        self.text = text
        self.content_type = content_type
        self.chat = SimpleNamespace(id=user_id)
        self.from_user = SimpleNamespace(id=user_id)
        self.bot = FakeBot()
        self.answers: list[str] = []

    async def answer(self, text, **kwargs):
        self.answers.append(text)


class TestConversationHandlers:
    async def test_text_goes_to_engine(self, engine, messenger):
        message = FakeMessage(text="pedido")

        await handle_text(message, engine)

        assert message.bot.actions == ["typing"]
        assert messenger.bodies("7") == [replies.ASK_ORDER_TEXT]

    @pytest.mark.parametrize("content_type", ["photo", "voice", "sticker"])
    async def test_non_text_gets_notice(self, content_type):
        message = FakeMessage(content_type=content_type)

        await handle_unsupported(message)

        assert message.answers == [replies.UNSUPPORTED_MESSAGE]
