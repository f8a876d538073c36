"""
Pedido Bot - Main entry point.
"""

import asyncio
import logging
import sys

from pedido_bot.bot.bot import get_bot, get_dispatcher
from pedido_bot.bot.dependencies import build_engine
from pedido_bot.bot.handlers import register_handlers
from pedido_bot.bot.messenger import TelegramMessenger
from pedido_bot.config import settings
from pedido_bot.db.sqlite import db


# Fix for Windows asyncio
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def on_startup() -> None:
    """Initialize services on startup."""
    logger.info("Starting Pedido Bot...")

    await db.init()
    logger.info("Database initialized")

    if settings.oracle_enabled:
        logger.info(f"LLM oracle enabled ({settings.llm_provider}, {settings.segmentation_strategy} segmentation)")


async def on_shutdown() -> None:
    """Cleanup on shutdown."""
    logger.info("Shutting down Pedido Bot...")

    await db.close()

    logger.info("Cleanup complete")


async def main() -> None:
    """Main function to run the bot."""
    bot = get_bot()
    dp = get_dispatcher()

    # Handlers receive the engine by parameter name
    dp["engine"] = build_engine(TelegramMessenger(bot))

    register_handlers(dp)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    logger.info("Bot is starting...")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
