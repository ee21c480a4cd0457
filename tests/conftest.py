"""Shared fixtures for HighBuy Monitor tests."""
import pytest

from core.models import SwapEvent


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def swap_event():
    return SwapEvent(
        tx_hash="A1B2C3D4E5F6A7B8",
        sender="zig1buyer",
        receiver="zig1receiver",
        offer_asset="uzig",
        offer_amount="150000000",
        ask_asset="coin.zig15nes6ctvl.karakchai",
        return_amount="29024932",
        pair_address="zig1pool",
    )


def tx_events(**overrides):
    """Build a CometBFT events map for a swap; pass None to drop a key."""
    events = {
        "wasm.action": ["swap"],
        "wasm.offer_asset": ["uzig"],
        "wasm.offer_amount": ["150000000"],
        "wasm.sender": ["zig1buyer"],
        "wasm.receiver": ["zig1receiver"],
        "wasm.return_amount": ["29024932"],
        "wasm.ask_asset": ["coin.zig15nes6ctvl.karakchai"],
        "wasm._contract_address": ["zig1pool"],
        "tx.hash": ["A1B2C3D4E5F6A7B8"],
    }
    for key, value in overrides.items():
        name = key.replace("__", ".")
        if value is None:
            events.pop(name, None)
        else:
            events[name] = value if isinstance(value, list) else [value]
    return events
