"""End-to-end: stream frame -> extractor -> fan-out."""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from bot.notifier import Notifier
from conftest import tx_events
from core.models import ConnectionState, DeliveryOutcome
from core.swap_extractor import SwapExtractor
from core.zigchain_ws import ZigchainWebSocket


def build_pipeline(chat_ids):
    registry = MagicMock()
    registry.list_all = MagicMock(return_value=set(chat_ids))
    registry.remove = AsyncMock(return_value=True)

    decimals = MagicMock()
    decimals.resolve = AsyncMock(side_effect=lambda denom: 6)
    prices = MagicMock()
    prices.native_price_usd = AsyncMock(return_value=None)
    prices.token_price_usd = AsyncMock(return_value=None)

    delivery = MagicMock()
    delivery.send = AsyncMock(return_value=DeliveryOutcome.DELIVERED)

    notifier = Notifier(delivery=delivery, registry=registry, decimals=decimals, prices=prices)
    notifier._rate_limit_delay = 0

    client = ZigchainWebSocket("wss://rpc.example/websocket", SwapExtractor("uzig", 100))
    client.state = ConnectionState.STREAMING
    client.on_swap = notifier.notify_high_buy
    return client, delivery


def frame(events):
    return json.dumps({"jsonrpc": "2.0", "id": 1, "result": {"data": {}, "events": events}})


@pytest.mark.asyncio
async def test_large_buy_is_rendered_and_delivered():
    client, delivery = build_pipeline(["100"])

    await client._handle_message(frame(tx_events(wasm__offer_amount="150000000")))
    await asyncio.gather(*list(client._tasks))

    delivery.send.assert_awaited_once()
    chat_id, text = delivery.send.await_args.args
    assert chat_id == "100"
    assert "💸 Spent: <b>150.00 ZIG</b>" in text
    assert "💰 Got: <b>29.02 KARAKCHAI</b>" in text


@pytest.mark.asyncio
async def test_buy_below_threshold_sends_nothing():
    client, delivery = build_pipeline(["100"])

    await client._handle_message(frame(tx_events(wasm__offer_amount="50000000")))
    await asyncio.gather(*list(client._tasks))

    delivery.send.assert_not_called()
