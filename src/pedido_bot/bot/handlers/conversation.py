"""
Conversation handlers: every text message and button press goes to the engine;
anything else gets a short notice.
"""

import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, Message

from pedido_bot.core.conversation import replies
from pedido_bot.core.conversation.engine import ConversationEngine

router = Router(name="conversation")
logger = logging.getLogger(__name__)


@router.message(F.text)
async def handle_text(message: Message, engine: ConversationEngine) -> None:
    """Forward free text to the conversation engine."""
    text = message.text.strip()
    if not text:
        return

    await message.bot.send_chat_action(chat_id=message.chat.id, action="typing")
    await engine.handle_message(str(message.from_user.id), text)


@router.callback_query(F.data)
async def handle_choice(callback: CallbackQuery, engine: ConversationEngine) -> None:
    """Forward the id of a pressed button to the conversation engine."""
    await callback.answer()

    # A choice is answered once; drop the keyboard so old buttons can't be replayed
    if callback.message is not None:
        try:
            await callback.message.edit_reply_markup(reply_markup=None)
        except TelegramBadRequest as e:
            logger.debug(f"Could not remove keyboard: {e}")

    await engine.handle_message(str(callback.from_user.id), callback.data)


@router.message()
async def handle_unsupported(message: Message) -> None:
    """Non-text content (photo, voice, sticker) gets a notice instead of a turn."""
    logger.info(f"Unsupported {message.content_type} message from {message.chat.id}")
    await message.answer(replies.UNSUPPORTED_MESSAGE)
