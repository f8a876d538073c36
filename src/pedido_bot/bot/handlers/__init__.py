"""
Bot handlers registration.
"""

from aiogram import Dispatcher

from pedido_bot.bot.handlers.start import router as start_router
from pedido_bot.bot.handlers.conversation import router as conversation_router


def register_handlers(dp: Dispatcher) -> None:
    """Register all handlers to dispatcher."""
    # Commands first, then the catch-all conversation handlers
    dp.include_router(start_router)
    dp.include_router(conversation_router)
