"""
Shared aiohttp plumbing for the REST lookups (denom metadata, prices).
"""
import logging
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


class RestClient:
    """
    Base class owning (or borrowing) an aiohttp session.

    Every request is bounded by a single total timeout and is never retried;
    callers decide what a failure means.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, timeout: float = 10):
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def _ensure_session(self):
        """Ensure aiohttp session exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

    async def close(self):
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET a URL and decode the JSON body. Raises on transport or HTTP errors."""
        await self._ensure_session()
        async with self._session.get(
            url,
            params=params,
            headers=headers,
            timeout=self._timeout,
        ) as response:
            response.raise_for_status()
            return await response.json(content_type=None)
