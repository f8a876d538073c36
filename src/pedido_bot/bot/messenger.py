"""
Telegram delivery of outbound messages.
"""

import logging
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import InlineKeyboardMarkup

from pedido_bot.bot.keyboards.order import build_choice_keyboard, format_choice_text
from pedido_bot.core.conversation.messages import ChoiceMessage, OutboundMessage
from pedido_bot.core.conversation.ports import Messenger

logger = logging.getLogger(__name__)


class TelegramMessenger(Messenger):
    """Sends directives through the Bot API. Delivery failures are logged, not raised."""

    def __init__(self, bot: Bot):
        self.bot = bot

    @staticmethod
    def _keyboard(message: ChoiceMessage) -> Optional[InlineKeyboardMarkup]:
        try:
            return build_choice_keyboard(message)
        except ValueError as e:
            # Numbered text still lets the user answer by typing
            logger.warning(f"Sending choice without keyboard: {e}")
            return None

    async def send(self, user_id: str, message: OutboundMessage) -> None:
        try:
            if isinstance(message, ChoiceMessage):
                keyboard = self._keyboard(message)
                await self.bot.send_message(
                    chat_id=int(user_id),
                    text=format_choice_text(message, numbered=keyboard is None),
                    reply_markup=keyboard,
                )
            else:
                await self.bot.send_message(chat_id=int(user_id), text=message.body)
        except TelegramAPIError as e:
            logger.error(f"Failed to deliver message to {user_id}: {e}")
        except Exception as e:
            logger.error(f"Unexpected delivery error for {user_id}: {e}", exc_info=True)
