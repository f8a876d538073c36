"""
Inline keyboards for choice messages.
"""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from pedido_bot.core.conversation.messages import ChoiceMessage, ChoiceStyle

# Telegram limit for callback_data
MAX_CALLBACK_BYTES = 64


def _button(option_id: str, title: str) -> InlineKeyboardButton:
    if len(option_id.encode("utf-8")) > MAX_CALLBACK_BYTES:
        raise ValueError(f"Choice id too long for callback data: {option_id!r}")
    return InlineKeyboardButton(text=title, callback_data=option_id)


def build_choice_keyboard(message: ChoiceMessage) -> InlineKeyboardMarkup:
    """
    Keyboard for a choice message.

    Buttons share one row; list options get a row each.
    """
    builder = InlineKeyboardBuilder()
    buttons = [_button(option.id, option.title) for option in message.options]

    if message.style == ChoiceStyle.BUTTONS:
        builder.row(*buttons)
    else:
        for button in buttons:
            builder.row(button)

    return builder.as_markup()


def format_choice_text(message: ChoiceMessage, numbered: bool = False) -> str:
    """
    Message body, with numbered options and descriptions for lists.

    `numbered` lists the options for any style, for when no keyboard is sent.
    """
    if message.style != ChoiceStyle.LIST and not numbered:
        return message.body

    lines = [message.body, ""]
    for i, option in enumerate(message.options, 1):
        line = f"{i}. {option.title}"
        if option.description:
            line += f" <i>({option.description})</i>"
        lines.append(line)
    return "\n".join(lines)
