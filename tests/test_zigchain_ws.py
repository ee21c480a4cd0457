"""Tests for the Tx stream client: backoff, frame classification, dispatch."""
import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from config import to_ws_url
from conftest import tx_events
from core.models import ConnectionState
from core.swap_extractor import SwapExtractor
from core.zigchain_ws import Backoff, ZigchainWebSocket, subscribe_request


@pytest.fixture
def client():
    ws_client = ZigchainWebSocket(
        ws_url="wss://rpc.example/websocket",
        extractor=SwapExtractor("uzig", 100),
        reconnect_delay=1,
        max_reconnect_delay=30,
    )
    ws_client.ws = AsyncMock()
    return ws_client


def data_frame(events):
    return json.dumps({
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "query": "tm.event='Tx'",
            "data": {"type": "tendermint/event/Tx", "value": {}},
            "events": events,
        },
    })


async def drain(ws_client):
    await asyncio.gather(*list(ws_client._tasks))


def test_backoff_doubles_up_to_ceiling():
    backoff = Backoff(base=1, ceiling=30)
    delays = [backoff.next_delay() for _ in range(8)]
    assert delays == [1, 2, 4, 8, 16, 30, 30, 30]


def test_backoff_reset_returns_to_base():
    backoff = Backoff(base=2, ceiling=10)
    backoff.next_delay()
    backoff.next_delay()
    backoff.reset()
    assert backoff.next_delay() == 2


def test_subscribe_request_envelope():
    assert subscribe_request() == {
        "jsonrpc": "2.0",
        "method": "subscribe",
        "id": 1,
        "params": {"query": "tm.event='Tx'"},
    }


@pytest.mark.parametrize("rpc, ws", [
    ("https://rpc.example.com", "wss://rpc.example.com/websocket"),
    ("https://rpc.example.com/", "wss://rpc.example.com/websocket"),
    ("http://localhost:26657", "ws://localhost:26657/websocket"),
])
def test_ws_url_derived_from_rpc(rpc, ws):
    assert to_ws_url(rpc) == ws


@pytest.mark.asyncio
async def test_subscribe_sends_request_and_awaits_confirmation(client):
    await client._subscribe()

    client.ws.send.assert_awaited_once_with(json.dumps(subscribe_request()))
    assert client.state == ConnectionState.AWAITING_CONFIRMATION


@pytest.mark.asyncio
async def test_ack_frame_confirms_and_resets_backoff(client):
    client.state = ConnectionState.AWAITING_CONFIRMATION
    client.backoff.next_delay()
    client.backoff.next_delay()

    await client._handle_message(json.dumps({"jsonrpc": "2.0", "id": 1, "result": {}}))

    assert client.state == ConnectionState.STREAMING
    assert client.backoff.next_delay() == 1


@pytest.mark.asyncio
async def test_first_data_frame_confirms_without_ack(client):
    client.state = ConnectionState.AWAITING_CONFIRMATION
    client.on_swap = AsyncMock()

    await client._handle_message(data_frame(tx_events(wasm__action="provide_liquidity")))

    assert client.state == ConnectionState.STREAMING
    client.on_swap.assert_not_called()


@pytest.mark.asyncio
async def test_unrelated_id_does_not_confirm(client):
    client.state = ConnectionState.AWAITING_CONFIRMATION
    await client._handle_message(json.dumps({"jsonrpc": "2.0", "id": 7, "result": {}}))
    assert client.state == ConnectionState.AWAITING_CONFIRMATION


@pytest.mark.asyncio
async def test_large_swap_is_dispatched(client):
    client.state = ConnectionState.STREAMING
    client.on_swap = AsyncMock()

    await client._handle_message(data_frame(tx_events()))
    await drain(client)

    client.on_swap.assert_awaited_once()
    swap = client.on_swap.await_args.args[0]
    assert swap.offer_amount == "150000000"
    assert swap.ask_asset == "coin.zig15nes6ctvl.karakchai"


@pytest.mark.asyncio
async def test_small_swap_is_not_dispatched(client):
    client.state = ConnectionState.STREAMING
    client.on_swap = AsyncMock()

    await client._handle_message(data_frame(tx_events(wasm__offer_amount="50000000")))
    await drain(client)

    client.on_swap.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("frame", [
    "not json",
    "[1, 2, 3]",
    json.dumps({"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "boom"}}),
    json.dumps({"jsonrpc": "2.0", "result": {"events": "garbage"}}),
])
async def test_bad_frames_are_skipped(client, frame):
    client.state = ConnectionState.STREAMING
    client.on_swap = AsyncMock()

    await client._handle_message(frame)

    client.on_swap.assert_not_called()
    assert client.state == ConnectionState.STREAMING


class _FakeConnection:
    """Async context manager yielding a socket that ends after given frames."""

    def __init__(self, frames):
        self.frames = frames
        self.sent = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True
        return False

    async def send(self, message):
        self.sent.append(message)

    async def close(self):
        self.closed = True

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            yield frame


@pytest.mark.asyncio
async def test_reconnect_loop_backs_off_and_resets_after_streaming(client):
    ack = json.dumps({"jsonrpc": "2.0", "id": 1, "result": {}})
    attempts = [
        OSError("refused"),
        OSError("refused"),
        _FakeConnection([ack]),  # reaches STREAMING, then remote closes
        OSError("refused"),
    ]
    connections = []
    sleeps = []

    def fake_connect(*args, **kwargs):
        attempt = attempts.pop(0)
        if isinstance(attempt, Exception):
            raise attempt
        connections.append(attempt)
        return attempt

    async def fake_sleep(delay):
        sleeps.append(delay)
        if not attempts:
            client.running = False

    with patch("core.zigchain_ws.websockets.connect", side_effect=fake_connect), \
            patch("core.zigchain_ws.asyncio.sleep", side_effect=fake_sleep):
        await client.start()

    assert sleeps == [1, 2, 1, 2]
    assert connections[0].closed
    assert json.loads(connections[0].sent[0])["method"] == "subscribe"
    assert client.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_failing_swap_handler_is_logged_and_released(client, caplog):
    client.state = ConnectionState.STREAMING
    client.on_swap = AsyncMock(side_effect=RuntimeError("boom"))

    await client._handle_message(data_frame(tx_events()))
    await asyncio.gather(*list(client._tasks), return_exceptions=True)
    await asyncio.sleep(0)

    assert client._tasks == set()
    assert "Swap handler failed" in caplog.text
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_cancel_pending_stops_in_flight_handlers(client):
    client.state = ConnectionState.STREAMING
    started = asyncio.Event()

    async def slow_handler(swap):
        started.set()
        await asyncio.sleep(60)

    client.on_swap = slow_handler
    await client._handle_message(data_frame(tx_events()))
    await started.wait()
    task = next(iter(client._tasks))

    await client.cancel_pending()

    assert task.cancelled()
    assert client._tasks == set()
