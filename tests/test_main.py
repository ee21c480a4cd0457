"""Tests for application shutdown ordering."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from config import Settings
from main import HighBuyMonitor


@pytest.mark.asyncio
async def test_shutdown_stops_alerts_before_closing_resources(monkeypatch):
    monkeypatch.setenv("RPC_URL", "https://rpc.zigchain.example")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456:ABC-DEF")
    monitor = HighBuyMonitor(Settings(_env_file=None))
    calls = []

    async def stream_forever():
        try:
            await asyncio.sleep(60)
        finally:
            calls.append("stream task finished")

    monitor.stream = MagicMock()
    monitor.stream.stop = AsyncMock(side_effect=lambda: calls.append("stream stop"))
    monitor.stream.cancel_pending = AsyncMock(side_effect=lambda: calls.append("alerts cancelled"))
    monitor.session = MagicMock()
    monitor.session.close = AsyncMock(side_effect=lambda: calls.append("session closed"))
    monitor.db = MagicMock()
    monitor.db.close = AsyncMock(side_effect=lambda: calls.append("db closed"))
    monitor.bot = MagicMock()
    monitor.bot.session.close = AsyncMock(side_effect=lambda: calls.append("bot closed"))

    monitor._stream_task = asyncio.create_task(stream_forever())
    await asyncio.sleep(0)

    await monitor.shutdown()

    assert monitor._stream_task.cancelled()
    assert calls == [
        "stream stop",
        "stream task finished",
        "alerts cancelled",
        "session closed",
        "db closed",
        "bot closed",
    ]
