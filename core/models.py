"""
Pydantic models for HighBuy Monitor data structures.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ConnectionState(str, Enum):
    """Lifecycle of one stream subscriber."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    STREAMING = "streaming"
    CLOSED = "closed"


class DeliveryOutcome(str, Enum):
    """Result of delivering one alert to one chat."""
    DELIVERED = "delivered"
    FORBIDDEN = "forbidden"  # blocked, kicked or deactivated; never retry
    FAILED = "failed"


class SwapEvent(BaseModel):
    """A swap that crossed the alert threshold."""
    model_config = ConfigDict(frozen=True)

    tx_hash: str = ""
    sender: str = ""
    receiver: str = ""
    offer_asset: str
    offer_amount: str  # raw micro units
    ask_asset: str = ""
    return_amount: str = ""  # raw units of ask_asset
    pair_address: str = ""
