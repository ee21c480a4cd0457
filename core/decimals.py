"""
Denom -> display decimals, resolved from the chain's bank metadata.
"""
import logging
from typing import Optional
from urllib.parse import quote

import aiohttp

from core.cache import MISSING, TTLCache
from core.rest import RestClient
from utils.formatting import clean_symbol

logger = logging.getLogger(__name__)


class DecimalsResolver(RestClient):
    """
    Resolves how many decimals a denom is displayed with.

    Results are cached for the life of the process. A failed or empty lookup
    caches 0, which shows the raw amount instead of guessing a wrong scale.
    """

    def __init__(
        self,
        rest_url: str,
        native_denom: str = "uzig",
        native_decimals: int = 6,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10,
        cache: Optional[TTLCache] = None,
    ):
        super().__init__(session=session, timeout=timeout)
        self.rest_url = rest_url.rstrip("/")
        self.cache: TTLCache[int] = cache if cache is not None else TTLCache(default_ttl=None)
        self.cache.set(native_denom, native_decimals, ttl=None)

    async def resolve(self, denom: str) -> int:
        cached = self.cache.get(denom)
        if cached is not MISSING:
            return cached

        exponent = 0
        if self.rest_url:
            try:
                exponent = await self._query_exponent(denom)
                logger.info(f"Cached decimals for {clean_symbol(denom)}: {exponent}")
            except Exception as e:
                logger.warning(f"Could not fetch decimals for {clean_symbol(denom)}: {e}")
                exponent = 0

        self.cache.set(denom, exponent, ttl=None)
        return exponent

    async def _query_exponent(self, denom: str) -> int:
        url = f"{self.rest_url}/cosmos/bank/v1beta1/denoms_metadata/{quote(denom, safe='')}"
        data = await self._fetch_json(url)
        return max_exponent(data)


def max_exponent(data) -> int:
    """
    Pick the display exponent from a DenomMetadata response.

    The largest exponent among denom_units is the human-facing unit.
    """
    metadata = data.get("metadata") if isinstance(data, dict) else None
    units = (metadata or {}).get("denom_units") or []

    exponent = 0
    for unit in units:
        try:
            value = int(unit.get("exponent", 0))
        except (TypeError, ValueError, AttributeError):
            continue
        if value > exponent:
            exponent = value
    return exponent
