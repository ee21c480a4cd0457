"""
Callback query handlers for the subscribe/unsubscribe buttons.
"""
import logging

from aiogram import Router, F
from aiogram.types import CallbackQuery

from bot.handlers import commands

logger = logging.getLogger(__name__)

router = Router()


@router.callback_query(F.data == "subscribe")
async def callback_subscribe(callback: CallbackQuery):
    """Subscribe the chat the button was pressed in."""
    chat_id = str(callback.message.chat.id)
    added = await commands.registry.add(chat_id)

    await callback.answer("✅ Subscribed!" if added else "ℹ️ Already subscribed")
    await callback.message.edit_text(
        "\n".join([
            "🔍 <b>HighBuy Monitor</b>",
            "",
            "✅ <b>You are subscribed!</b>",
            "",
            f"You'll receive alerts for swaps ≥ <b>{commands.min_amount_text()}</b>.",
            "",
            "Use /stop to unsubscribe.",
            "Use /status to check monitor health.",
        ]),
        parse_mode="HTML",
    )


@router.callback_query(F.data == "unsubscribe")
async def callback_unsubscribe(callback: CallbackQuery):
    """Unsubscribe the chat the button was pressed in."""
    chat_id = str(callback.message.chat.id)
    removed = await commands.registry.remove(chat_id)

    await callback.answer("🛑 Unsubscribed" if removed else "ℹ️ You weren't subscribed")
    await callback.message.edit_text(
        "\n".join([
            "🛑 <b>Unsubscribed</b>",
            "",
            "You will no longer receive high-buy alerts.",
            "Use /start to subscribe again anytime.",
        ]),
        parse_mode="HTML",
    )
