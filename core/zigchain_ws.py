"""
ZigChain CometBFT WebSocket client.
Subscribes to Tx events and hands large native-funded swaps to a callback.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed

from core.models import ConnectionState, SwapEvent
from core.swap_extractor import SwapExtractor

logger = logging.getLogger(__name__)

SUBSCRIBE_QUERY = "tm.event='Tx'"
SUBSCRIBE_REQUEST_ID = 1


@dataclass
class Backoff:
    """Exponential reconnect delay: base, 2*base, 4*base ... capped at ceiling."""
    base: float = 1
    ceiling: float = 30
    current: Optional[float] = None

    def next_delay(self) -> float:
        delay = self.base if self.current is None else self.current
        self.current = min(delay * 2, self.ceiling)
        return min(delay, self.ceiling)

    def reset(self):
        self.current = None


def subscribe_request(request_id: int = SUBSCRIBE_REQUEST_ID, query: str = SUBSCRIBE_QUERY) -> dict:
    return {
        "jsonrpc": "2.0",
        "method": "subscribe",
        "id": request_id,
        "params": {"query": query},
    }


class ZigchainWebSocket:
    """
    Auto-reconnecting WebSocket client for the chain's Tx event stream.

    One connection at a time. Every close, clean or not, goes through the
    backoff delay before the next connect; reaching STREAMING resets it.
    """

    def __init__(
        self,
        ws_url: str,
        extractor: SwapExtractor,
        reconnect_delay: float = 1,
        max_reconnect_delay: float = 30,
        ping_interval: int = 30,
        ping_timeout: int = 20,
    ):
        """Initialize the Tx stream client."""
        self.ws_url = ws_url
        self.extractor = extractor
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.backoff = Backoff(base=reconnect_delay, ceiling=max_reconnect_delay)

        self.ws = None
        self.running = False
        self.state = ConnectionState.DISCONNECTED

        # Callback handler
        self.on_swap: Optional[Callable[[SwapEvent], Awaitable[None]]] = None

        self._tasks: Set[asyncio.Task] = set()

    async def start(self):
        """Run the connect/listen/reconnect loop until stop() is called."""
        self.running = True
        logger.info("Starting ZigChain WebSocket")

        while self.running:
            try:
                await self._connect_and_listen()
                logger.warning("WebSocket closed by remote")
            except ConnectionClosed as e:
                logger.warning(f"WebSocket closed (code={e.rcvd.code if e.rcvd else None})")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"WebSocket error: {e}")
            finally:
                self.ws = None

            if not self.running:
                break

            self._set_state(ConnectionState.CLOSED)
            delay = self.backoff.next_delay()
            logger.info(f"Reconnecting in {delay} seconds...")
            await asyncio.sleep(delay)

        self._set_state(ConnectionState.DISCONNECTED)

    async def stop(self):
        """Stop the WebSocket connection."""
        self.running = False
        if self.ws:
            await self.ws.close()
        logger.info("ZigChain WebSocket stopped")

    def _set_state(self, state: ConnectionState):
        if state != self.state:
            logger.debug(f"Stream state {self.state.value} -> {state.value}")
            self.state = state

    async def _connect_and_listen(self):
        """Connect, subscribe and route messages until the socket closes."""
        self._set_state(ConnectionState.CONNECTING)
        logger.info(f"Connecting to WebSocket: {self.ws_url}")

        async with websockets.connect(
            self.ws_url,
            ping_interval=self.ping_interval,
            ping_timeout=self.ping_timeout
        ) as ws:
            self.ws = ws
            logger.info("WebSocket connected")

            await self._subscribe()

            async for message in ws:
                await self._handle_message(message)

    async def _subscribe(self):
        await self.ws.send(json.dumps(subscribe_request()))
        self._set_state(ConnectionState.AWAITING_CONFIRMATION)
        logger.info(f"Subscribing to: {SUBSCRIBE_QUERY}")

    def _confirm(self, reason: str):
        if self.state == ConnectionState.AWAITING_CONFIRMATION:
            self._set_state(ConnectionState.STREAMING)
            self.backoff.reset()
            logger.info(f"Subscription confirmed ({reason})")

    async def _handle_message(self, message):
        """Classify one frame and route data frames to the extractor."""
        try:
            data = json.loads(message)
        except (TypeError, ValueError):
            logger.warning(f"Failed to decode message: {str(message)[:200]}")
            return

        if not isinstance(data, dict):
            logger.debug(f"Ignoring non-object frame: {str(message)[:200]}")
            return

        if data.get("error"):
            logger.warning(f"RPC error frame: {data['error']}")
            return

        result = data.get("result")
        events = result.get("events") if isinstance(result, dict) else None
        payload = result.get("data") if isinstance(result, dict) else None

        if events or payload:
            self._confirm("first event received")
            if isinstance(events, dict):
                self._handle_events(events)
        elif data.get("id") == SUBSCRIBE_REQUEST_ID:
            self._confirm("acknowledged by RPC")

    def _handle_events(self, events: dict):
        try:
            swap = self.extractor.extract(events)
        except Exception as e:
            logger.error(f"Error parsing Tx events: {e}")
            return

        if swap is None:
            return

        amount = self.extractor.native_amount(swap.offer_amount)
        logger.info(f"High buy: {amount:.2f} native -> {swap.ask_asset} | tx: {swap.tx_hash[:12]}...")

        if self.on_swap:
            task = asyncio.create_task(self.on_swap(swap))
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)
        else:
            logger.warning("No on_swap callback registered")

    def _on_task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Swap handler failed: {exc!r}", exc_info=exc)

    async def cancel_pending(self):
        """Cancel in-flight swap handlers and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} pending swap handler(s)")
