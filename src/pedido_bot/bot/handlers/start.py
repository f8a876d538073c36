"""
Command handlers.
"""

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from pedido_bot.core.conversation.engine import ConversationEngine

router = Router(name="start")


HELP_MESSAGE = """🤖 <b>Cómo hacer un pedido:</b>

• Escribe los productos que necesitas, con cantidad y unidad:
  «2 cajas de leche entera y 3 paquetes de arroz»
• Si falta algún dato te lo pregunto
• Si hay varios productos parecidos te muestro las opciones

<b>Durante el pedido:</b>
• «quitar 2» — quita el producto número 2
• «cancelar» — descarta el pedido en curso

<b>Comandos:</b>
/reset — empezar de nuevo
/help — esta ayuda"""


@router.message(CommandStart())
async def handle_start(message: Message, engine: ConversationEngine) -> None:
    """Handle /start command."""
    await engine.handle_message(str(message.from_user.id), "/reset")


@router.message(Command("help"))
async def handle_help(message: Message) -> None:
    """Handle /help command."""
    await message.answer(HELP_MESSAGE)


@router.message(Command("reset"))
async def handle_reset(message: Message, engine: ConversationEngine) -> None:
    """Drop the current conversation state."""
    await engine.handle_message(str(message.from_user.id), "/reset")
