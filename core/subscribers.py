"""
Subscriber registry: the set of chats that receive high-buy alerts.
"""
import asyncio
import logging
from typing import Iterable, Set

from core.database import Database

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """
    In-memory subscriber set with write-through persistence.

    Reads return a snapshot copy, so a fan-out in progress is not affected by
    concurrent subscribe/unsubscribe commands. Mutations are serialized and
    committed to the database before they return.
    """

    def __init__(self, db: Database):
        self.db = db
        self._subscribers: Set[str] = set()
        self._lock = asyncio.Lock()

    async def load(self, static_ids: Iterable[str] = ()):
        """Merge configured chat ids with persisted ones. Called once at startup."""
        async with self._lock:
            self._subscribers.update(chat_id for chat_id in static_ids if chat_id)
            self._subscribers.update(await self.db.get_subscribers())
            await self.db.add_subscribers(self._subscribers)
        logger.info(f"{len(self._subscribers)} subscriber(s) loaded")

    def list_all(self) -> Set[str]:
        return set(self._subscribers)

    async def add(self, chat_id: str) -> bool:
        """Add a subscriber. Returns True if it was not subscribed before."""
        async with self._lock:
            if chat_id in self._subscribers:
                return False
            await self.db.add_subscriber(chat_id)
            self._subscribers.add(chat_id)
        logger.info(f"Subscriber added: {chat_id}")
        return True

    async def remove(self, chat_id: str) -> bool:
        """Remove a subscriber. Returns True if it was subscribed."""
        async with self._lock:
            if chat_id not in self._subscribers:
                return False
            await self.db.remove_subscriber(chat_id)
            self._subscribers.discard(chat_id)
        logger.info(f"Subscriber removed: {chat_id}")
        return True

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, chat_id: str) -> bool:
        return chat_id in self._subscribers
