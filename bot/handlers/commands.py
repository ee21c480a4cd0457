"""
Command handlers for HighBuy Monitor.
Handles /start, /stop and /status.
"""
import logging
import time

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from bot.keyboards import get_subscribe_keyboard, get_unsubscribe_keyboard
from config import Settings
from core.subscribers import SubscriberRegistry
from core.zigchain_ws import ZigchainWebSocket

logger = logging.getLogger(__name__)

router = Router()

# Global references (will be set by main.py)
registry: SubscriberRegistry = None
settings: Settings = None
stream: ZigchainWebSocket = None
start_time: float = time.time()


def min_amount_text() -> str:
    return f"{settings.high_buy_min_zig:g} {settings.native_symbol}"


@router.message(CommandStart())
async def cmd_start(message: Message):
    """Handle /start command."""
    welcome_text = "\n".join([
        "🔍 <b>Welcome to HighBuy Monitor!</b>",
        "",
        "I monitor ZigChain for large swap events",
        "and send you real-time alerts.",
        "",
        f"💰 Min threshold: <b>{min_amount_text()}</b>",
        "",
        "Tap the button below to subscribe:",
    ])

    await message.answer(welcome_text, parse_mode="HTML", reply_markup=get_subscribe_keyboard())


@router.message(Command("stop"))
async def cmd_stop(message: Message):
    """Handle /stop command."""
    await message.answer(
        "\n".join([
            "⚠️ <b>Unsubscribe from alerts?</b>",
            "",
            "You will stop receiving high-buy notifications.",
            "You can always re-subscribe with /start.",
        ]),
        parse_mode="HTML",
        reply_markup=get_unsubscribe_keyboard(),
    )


@router.message(Command("status"))
async def cmd_status(message: Message):
    """Handle /status command."""
    uptime_seconds = time.time() - start_time
    hours = int(uptime_seconds // 3600)
    minutes = int((uptime_seconds % 3600) // 60)
    stream_state = stream.state.value if stream else "not started"

    status_text = "\n".join([
        "🔍 <b>HighBuy Monitor Status</b>",
        "",
        f"🌐 RPC: <code>{settings.rpc_url}</code>",
        f"🔌 WS: <code>{settings.ws_url}</code>",
        f"💰 Min {settings.native_symbol}: <b>{settings.high_buy_min_zig:g}</b>",
        "📡 Mode: <b>WebSocket (real-time)</b>",
        f"📶 Stream: <b>{stream_state}</b>",
        f"👥 Subscribers: <b>{len(registry)}</b>",
        f"⏱️ Uptime: {hours}h {minutes}m",
    ])

    await message.answer(status_text, parse_mode="HTML")
