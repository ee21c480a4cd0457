"""
Database layer using aiosqlite for HighBuy Monitor.
Persists the subscriber list across restarts.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

import aiosqlite

logger = logging.getLogger(__name__)


class Database:
    """Async database manager using SQLite."""

    def __init__(self, db_path: str):
        """Initialize database with path."""
        self.db_path = db_path
        self.conn: Optional[aiosqlite.Connection] = None

    async def connect(self):
        """Connect to the database and create tables if needed."""
        self.conn = await aiosqlite.connect(self.db_path)
        self.conn.row_factory = aiosqlite.Row
        await self._create_tables()
        logger.info(f"Database connected: {self.db_path}")

    async def close(self):
        """Close database connection."""
        if self.conn:
            await self.conn.close()
            self.conn = None
            logger.info("Database connection closed")

    async def _create_tables(self):
        """Create database tables if they don't exist."""
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS subscribers (
                chat_id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL
            )
        """)
        await self.conn.commit()

    # Subscriber operations
    async def get_subscribers(self) -> List[str]:
        """Get all persisted subscriber chat ids."""
        cursor = await self.conn.execute("SELECT chat_id FROM subscribers ORDER BY created_at")
        rows = await cursor.fetchall()
        return [row["chat_id"] for row in rows]

    async def add_subscribers(self, chat_ids: Iterable[str]):
        """Insert chat ids, ignoring ones already stored."""
        now = datetime.utcnow().isoformat()
        await self.conn.executemany("""
            INSERT OR IGNORE INTO subscribers (chat_id, created_at)
            VALUES (?, ?)
        """, [(chat_id, now) for chat_id in chat_ids])
        await self.conn.commit()

    async def add_subscriber(self, chat_id: str):
        await self.add_subscribers([chat_id])

    async def remove_subscriber(self, chat_id: str):
        await self.conn.execute("DELETE FROM subscribers WHERE chat_id = ?", (chat_id,))
        await self.conn.commit()
