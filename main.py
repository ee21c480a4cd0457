"""
HighBuy Monitor - Main Entry Point
Real-time ZigChain swap monitoring with Telegram alerts.
"""
import asyncio
import logging
import sys
from typing import Optional

import aiohttp
from aiogram import Bot, Dispatcher
from pydantic import ValidationError

from config import Settings, ensure_data_directory, get_settings
from bot.delivery import TelegramDelivery
from bot.handlers import callbacks, commands
from bot.notifier import Notifier
from core.database import Database
from core.decimals import DecimalsResolver
from core.models import SwapEvent
from core.pricing import PriceResolver
from core.subscribers import SubscriberRegistry
from core.swap_extractor import SwapExtractor
from core.zigchain_ws import ZigchainWebSocket
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class HighBuyMonitor:
    """Main bot application orchestrating all components."""

    def __init__(self, settings: Settings):
        """Initialize bot components."""
        self.settings = settings

        # Core components
        self.bot = Bot(token=settings.telegram_bot_token)
        self.dp = Dispatcher()
        self.db: Optional[Database] = None
        self.registry: Optional[SubscriberRegistry] = None
        self.session: Optional[aiohttp.ClientSession] = None
        self.notifier: Optional[Notifier] = None
        self.stream: Optional[ZigchainWebSocket] = None
        self._stream_task: Optional[asyncio.Task] = None

    async def setup(self):
        """Setup all components."""
        s = self.settings
        logger.info("Setting up HighBuy Monitor...")
        logger.info(f"RPC:     {s.rpc_url}")
        logger.info(f"WS:      {s.ws_url}")
        logger.info(f"Min {s.native_symbol}: {s.high_buy_min_zig:g}")

        ensure_data_directory(s)

        # Subscribers
        self.db = Database(s.database_path)
        await self.db.connect()
        self.registry = SubscriberRegistry(self.db)
        await self.registry.load(s.chat_ids)

        # Enrichment lookups share one HTTP session
        self.session = aiohttp.ClientSession()
        decimals = DecimalsResolver(
            rest_url=s.rest_url,
            native_denom=s.native_denom,
            native_decimals=s.native_decimals,
            session=self.session,
            timeout=s.http_timeout,
        )
        prices = PriceResolver(
            pools_api_url=s.degenter_api_url,
            cmc_base_url=s.cmc_base_url,
            cmc_api_key=s.cmc_api_key,
            cmc_id=s.cmc_zig_id,
            cmc_symbol=s.cmc_zig_symbol,
            session=self.session,
            timeout=s.http_timeout,
            ttl=s.price_ttl,
        )

        self.notifier = Notifier(
            delivery=TelegramDelivery(self.bot),
            registry=self.registry,
            decimals=decimals,
            prices=prices,
            native_denom=s.native_denom,
            native_symbol=s.native_symbol,
            native_decimals=s.native_decimals,
            explorer_tx_url=s.explorer_tx_url,
            pools_url=s.pools_url,
            banner_path=s.default_banner,
        )

        self.stream = ZigchainWebSocket(
            ws_url=s.ws_url,
            extractor=SwapExtractor(s.native_denom, s.high_buy_min_zig),
            reconnect_delay=s.ws_reconnect_delay,
            max_reconnect_delay=s.ws_max_reconnect_delay,
            ping_interval=s.ws_ping_interval,
            ping_timeout=s.ws_ping_timeout,
        )
        self.stream.on_swap = self.handle_swap

        # Setup handlers
        commands.registry = self.registry
        commands.settings = s
        commands.stream = self.stream

        self.dp.include_router(commands.router)
        self.dp.include_router(callbacks.router)

        logger.info("Setup complete!")

    async def handle_swap(self, swap: SwapEvent):
        """Handle an accepted high-buy swap from the stream."""
        await self.notifier.notify_high_buy(swap)

    async def start(self):
        """Start the stream and Telegram polling."""
        logger.info("Starting HighBuy Monitor...")

        self._stream_task = asyncio.create_task(self.stream.start())

        try:
            await self.dp.start_polling(self.bot, allowed_updates=self.dp.resolve_used_update_types())
        finally:
            await self.shutdown()

    async def shutdown(self):
        """Graceful shutdown."""
        logger.info("Shutting down HighBuy Monitor...")

        # Stream and in-flight alerts go first; they still use the session and db
        if self.stream:
            await self.stream.stop()
        if self._stream_task:
            self._stream_task.cancel()
            await asyncio.gather(self._stream_task, return_exceptions=True)
        if self.stream:
            await self.stream.cancel_pending()
        if self.session:
            await self.session.close()
        if self.db:
            await self.db.close()
        await self.bot.session.close()

        logger.info("Shutdown complete")


async def main():
    """Main entry point."""
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Missing or invalid configuration, copy .env.example to .env and fill it in:\n{e}")
        sys.exit(1)

    setup_logging(log_level=settings.log_level)
    monitor = HighBuyMonitor(settings)

    try:
        await monitor.setup()
        await monitor.start()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
