"""
Notification system for sending high-buy alerts to subscribers.
Handles enrichment, formatting and per-chat delivery.
"""
import asyncio
import logging
from typing import Optional

from bot.delivery import TelegramDelivery
from bot.keyboards import get_alert_keyboard
from core.decimals import DecimalsResolver
from core.models import DeliveryOutcome, SwapEvent
from core.pricing import PriceResolver, usd_value
from core.subscribers import SubscriberRegistry
from utils.formatting import clean_symbol, format_high_buy_alert, format_with_decimals

logger = logging.getLogger(__name__)
alerts_logger = logging.getLogger("alerts")


class Notifier:
    """
    Fans a high-buy alert out to every subscriber.

    A failed delivery only affects its own chat. Chats that permanently reject
    the bot are unsubscribed.
    """

    def __init__(
        self,
        delivery: TelegramDelivery,
        registry: SubscriberRegistry,
        decimals: DecimalsResolver,
        prices: PriceResolver,
        native_denom: str = "uzig",
        native_symbol: str = "ZIG",
        native_decimals: int = 6,
        explorer_tx_url: str = "https://www.zigscan.org/tx",
        pools_url: str = "https://app.degenter.io/token",
        banner_path: Optional[str] = None,
    ):
        """Initialize notifier with its collaborators."""
        self.delivery = delivery
        self.registry = registry
        self.decimals = decimals
        self.prices = prices
        self.native_denom = native_denom
        self.native_symbol = native_symbol
        self.native_decimals = native_decimals
        self.explorer_tx_url = explorer_tx_url.rstrip("/")
        self.pools_url = pools_url.rstrip("/")
        self.banner_path = banner_path
        self._rate_limit_delay = 0.05  # 50ms between messages

    async def render(self, swap: SwapEvent) -> str:
        """Resolve decimals and prices for both sides and build the message."""
        offer_decimals, ask_decimals, native_price, offer_price, ask_price = await asyncio.gather(
            self.decimals.resolve(swap.offer_asset),
            self.decimals.resolve(swap.ask_asset),
            self.prices.native_price_usd(),
            self.prices.token_price_usd(swap.offer_asset),
            self.prices.token_price_usd(swap.ask_asset),
        )

        spent_unit_price = native_price if swap.offer_asset == self.native_denom else offer_price

        return format_high_buy_alert(
            swap,
            spent_formatted=format_with_decimals(swap.offer_amount, offer_decimals),
            got_formatted=format_with_decimals(swap.return_amount, ask_decimals),
            spent_usd=usd_value(swap.offer_amount, offer_decimals, spent_unit_price),
            got_usd=usd_value(swap.return_amount, ask_decimals, ask_price),
            native_denom=self.native_denom,
            native_symbol=self.native_symbol,
        )

    async def notify_high_buy(self, swap: SwapEvent) -> int:
        """
        Send a high-buy alert to all current subscribers.

        Returns:
            Number of chats the alert was delivered to
        """
        try:
            text = await self.render(swap)
        except Exception as e:
            logger.error(f"Error rendering alert for tx {swap.tx_hash}: {e}", exc_info=True)
            return 0

        keyboard = get_alert_keyboard(
            f"{self.explorer_tx_url}/{swap.tx_hash}",
            f"{self.pools_url}/{swap.ask_asset}",
        )

        delivered = 0
        for chat_id in self.registry.list_all():
            outcome = await self._send(chat_id, text, keyboard)
            if outcome == DeliveryOutcome.DELIVERED:
                delivered += 1
            elif outcome == DeliveryOutcome.FORBIDDEN:
                await self._unsubscribe(chat_id)

        amount = int(swap.offer_amount) / 10 ** self.native_decimals if swap.offer_amount.isdigit() else 0
        alerts_logger.info(
            f"Alert sent: {self._symbol(swap.ask_asset)} | {amount:,.2f} {self._symbol(swap.offer_asset)} "
            f"| tx {swap.tx_hash} | {delivered} chat(s)"
        )
        return delivered

    async def _send(self, chat_id: str, text: str, keyboard) -> DeliveryOutcome:
        """Send with rate limiting; never raises."""
        await asyncio.sleep(self._rate_limit_delay)
        try:
            return await self.delivery.send(
                chat_id,
                text,
                photo_path=self.banner_path,
                reply_markup=keyboard,
            )
        except Exception as e:
            logger.error(f"Error sending alert to chat {chat_id}: {e}")
            return DeliveryOutcome.FAILED

    async def _unsubscribe(self, chat_id: str):
        """Drop a chat that rejected the bot; never raises."""
        logger.info(f"Auto-unsubscribing {chat_id} (bot was blocked/deactivated)")
        try:
            await self.registry.remove(chat_id)
        except Exception as e:
            logger.error(f"Error unsubscribing chat {chat_id}: {e}")

    def _symbol(self, denom: str) -> str:
        return clean_symbol(denom, self.native_denom, self.native_symbol)
