"""
Telegram inline keyboards for HighBuy Monitor.
"""
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder


def get_subscribe_keyboard() -> InlineKeyboardMarkup:
    """Keyboard shown on /start."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="Subscribe 🔔", callback_data="subscribe")
    )
    return builder.as_markup()


def get_unsubscribe_keyboard() -> InlineKeyboardMarkup:
    """Keyboard shown on /stop."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="Unsubscribe 🔕", callback_data="unsubscribe")
    )
    return builder.as_markup()


def get_alert_keyboard(tx_url: str, pools_url: str) -> InlineKeyboardMarkup:
    """Link buttons attached to every high-buy alert."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="🔍 View TX", url=tx_url),
        InlineKeyboardButton(text="📊 Pools", url=pools_url),
    )
    return builder.as_markup()
