"""
Turns CometBFT Tx event maps into high-buy SwapEvents.
"""
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from core.models import SwapEvent

# The native asset is always quoted in micro units on chain
NATIVE_MICRO = Decimal(10) ** 6

SWAP_ACTIONS = ("swap", "Swap")


def first_value(events: Dict[str, List[str]], key: str) -> str:
    """Events may repeat a key; only the first value counts."""
    values = events.get(key)
    if isinstance(values, list) and values:
        return str(values[0])
    return ""


class SwapExtractor:
    """Pass/reject filter for native-funded swaps above a threshold."""

    def __init__(self, native_denom: str, min_native_amount: float):
        self.native_denom = native_denom
        self.min_native_amount = Decimal(str(min_native_amount))

    def native_amount(self, offer_amount: str) -> Optional[Decimal]:
        """Raw micro amount -> whole native units, or None if unparseable."""
        try:
            value = Decimal(offer_amount.strip())
        except (InvalidOperation, AttributeError):
            return None
        if not value.is_finite():
            return None
        return value / NATIVE_MICRO

    def extract(self, events: Dict[str, List[str]]) -> Optional[SwapEvent]:
        """
        Return a SwapEvent if the event map is a large native-funded swap.

        Anything else returns None; rejection is not an error.
        """
        if first_value(events, "wasm.action") not in SWAP_ACTIONS:
            return None

        offer_asset = first_value(events, "wasm.offer_asset")
        if offer_asset != self.native_denom:
            return None

        offer_amount = first_value(events, "wasm.offer_amount")
        amount = self.native_amount(offer_amount)
        if amount is None or amount < self.min_native_amount:
            return None

        return SwapEvent(
            tx_hash=first_value(events, "tx.hash"),
            sender=first_value(events, "wasm.sender"),
            receiver=first_value(events, "wasm.receiver"),
            offer_asset=offer_asset,
            offer_amount=offer_amount,
            ask_asset=first_value(events, "wasm.ask_asset"),
            return_amount=first_value(events, "wasm.return_amount"),
            pair_address=first_value(events, "wasm._contract_address"),
        )
