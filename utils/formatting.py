"""
Message formatting utilities for Telegram high-buy alerts.
"""
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from html import escape
from typing import Optional

from core.models import SwapEvent

CENTS = Decimal("0.01")


def clean_symbol(denom: str, native_denom: str = "uzig", native_symbol: str = "ZIG") -> str:
    """
    Short display symbol for a denom.

    "coin.zig15nes6ctvl...karakchai" -> "KARAKCHAI"
    "uzig" -> "ZIG" (the configured native denom maps to its symbol)
    "ibc/6490A7EAB61059BFC1CDDEB05917DD70BDF3A611654162A1A47DB930D40D8AF4" -> "IBC-6490A7"
    """
    if denom == native_denom:
        return native_symbol
    if "." in denom:
        return denom.split(".")[-1].upper()
    if denom.startswith("ibc/"):
        return f"IBC-{denom[4:10].upper()}"
    return denom.upper()


def format_with_decimals(raw_amount: str, decimals: int) -> str:
    """
    Scale a raw amount by the denom's decimals for display.

    "30000000" with 6 decimals -> "30.00"
    "29024932" with 0 decimals -> "29,024,932"

    Halves round up ("125000" with 6 decimals -> "0.13").
    """
    try:
        raw = Decimal(str(raw_amount).strip())
    except InvalidOperation:
        return "0"
    if not raw.is_finite():
        return "0"

    value = raw.scaleb(-decimals)
    if decimals > 0:
        try:
            value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            pass  # more digits than the context precision; cents are noise there
        return f"{value:,.2f}"
    return f"{int(value):,}"


def format_usd(value: Optional[float]) -> str:
    """
    Format a USD amount, keeping sub-cent prices visible.

    >= $1: 2 decimals, >= $0.01: 4 decimals, below: 6 to 8 decimals.
    """
    if value is None or not math.isfinite(value):
        return "n/a"

    if value >= 1:
        return f"${value:,.2f}"
    if value >= 0.01:
        return f"${value:,.4f}"

    text = f"{value:,.8f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0").ljust(6, "0")
    return f"${whole}.{fraction}"


def usd_suffix(value: Optional[float]) -> str:
    return "" if value is None else f" ({format_usd(value)})"


def format_high_buy_alert(
    swap: SwapEvent,
    spent_formatted: str,
    got_formatted: str,
    spent_usd: Optional[float] = None,
    got_usd: Optional[float] = None,
    native_denom: str = "uzig",
    native_symbol: str = "ZIG",
) -> str:
    """
    Format a high-buy swap into an HTML Telegram message.

    Args:
        swap: The accepted swap
        spent_formatted: Offer amount already scaled by its decimals
        got_formatted: Return amount already scaled by its decimals
        spent_usd: USD value of the offer amount, if priced
        got_usd: USD value of the return amount, if priced
        native_denom: Chain's native denom
        native_symbol: Display symbol for native_denom

    Returns:
        Message text using Telegram HTML markup
    """
    bought_symbol = escape(clean_symbol(swap.ask_asset, native_denom, native_symbol))
    spent_symbol = escape(clean_symbol(swap.offer_asset, native_denom, native_symbol))

    return "\n".join([
        f"🚀 <b>HIGH BUY — {bought_symbol}</b>",
        "",
        f"💸 Spent: <b>{spent_formatted} {spent_symbol}</b>{usd_suffix(spent_usd)}",
        f"💰 Got: <b>{got_formatted} {bought_symbol}</b>{usd_suffix(got_usd)}",
        "",
        f"👤 Buyer: <code>{escape(swap.sender)}</code>",
        f"📥 Receiver: <code>{escape(swap.receiver)}</code>",
        f"🔗 Pool: <code>{escape(swap.pair_address)}</code>",
    ])
