"""
Bot Instance Singleton

Provides a single shared Telegram Bot instance used for staff alerts.
This prevents creating multiple Bot instances which wastes resources (new HTTP session each time).

Usage:
    from bot_instance import get_bot
    bot = get_bot()
    await bot.send_message(chat_id, text)

Note: Bot instance is created lazily, only when staff alerts are configured (TOKEN + ADMIN_ID_LIST).
"""

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

import config

_bot_instance = None


def get_bot() -> Bot:
    global _bot_instance
    if _bot_instance is None:
        _bot_instance = Bot(
            token=config.TOKEN,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML)
        )
    return _bot_instance


async def close_bot():
    """
    Close the Bot instance session.

    Called from the application lifespan on shutdown.
    """
    global _bot_instance
    if _bot_instance is not None:
        await _bot_instance.session.close()
        _bot_instance = None
