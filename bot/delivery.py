"""
Delivery of a single rendered alert to a single Telegram chat.
"""
import logging
from pathlib import Path
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramForbiddenError
from aiogram.types import FSInputFile, InlineKeyboardMarkup

from core.models import DeliveryOutcome

logger = logging.getLogger(__name__)


class TelegramDelivery:
    """
    Sends one message or captioned photo and classifies the result.

    TelegramForbiddenError covers every permanent rejection Telegram reports
    (bot blocked, kicked from the group, user deactivated), so the outcome is
    decided by exception type rather than by reading the error text.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(
        self,
        chat_id: str,
        text: str,
        photo_path: Optional[str] = None,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> DeliveryOutcome:
        try:
            if photo_path and Path(photo_path).exists():
                await self.bot.send_photo(
                    chat_id=chat_id,
                    photo=FSInputFile(photo_path),
                    caption=text,
                    parse_mode="HTML",
                    reply_markup=reply_markup,
                )
            else:
                await self.bot.send_message(
                    chat_id=chat_id,
                    text=text,
                    parse_mode="HTML",
                    reply_markup=reply_markup,
                    disable_web_page_preview=True,
                )
            return DeliveryOutcome.DELIVERED

        except TelegramForbiddenError as e:
            logger.info(f"Chat {chat_id} rejected delivery permanently: {e.message}")
            return DeliveryOutcome.FORBIDDEN

        except Exception as e:
            logger.error(f"Send fail to {chat_id}: {e}")
            return DeliveryOutcome.FAILED
