"""
USD pricing for swap alerts.

Token prices come from the Degenter pools API, the native asset price from
CoinMarketCap. Both are cached for a short window, including failures, so a
flaky upstream is asked at most once per window per asset.
"""
import logging
import math
from typing import Any, Callable, Optional, Sequence
from urllib.parse import quote

import aiohttp

from core.cache import MISSING, TTLCache
from core.rest import RestClient

logger = logging.getLogger(__name__)

PRICE_TTL = 30  # seconds


def to_positive_float(value: Any) -> Optional[float]:
    """Return value as a float if it is a finite number > 0, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


# Pool payload shapes, in priority order
def price_from_object(payload: Any) -> Optional[float]:
    return to_positive_float(_get(payload, "priceUsd"))


def price_from_list(payload: Any) -> Optional[float]:
    return to_positive_float(_get(_first(payload), "priceUsd"))


def price_from_data(payload: Any) -> Optional[float]:
    return to_positive_float(_get(_first(_get(payload, "data")), "priceUsd"))


def price_from_pools(payload: Any) -> Optional[float]:
    return to_positive_float(_get(_first(_get(payload, "pools")), "priceUsd"))


PRICE_EXTRACTORS: Sequence[Callable[[Any], Optional[float]]] = (
    price_from_object,
    price_from_list,
    price_from_data,
    price_from_pools,
)


def extract_price_usd(payload: Any, extractors=PRICE_EXTRACTORS) -> Optional[float]:
    """Return the first usable price any extractor finds."""
    for extractor in extractors:
        price = extractor(payload)
        if price is not None:
            return price
    return None


def extract_cmc_quote(payload: Any) -> Optional[float]:
    """
    Pull quote.USD.price out of a CoinMarketCap quotes/latest response.

    `data` is keyed by id or symbol; symbol lookups map to a list of matches.
    """
    root = _get(payload, "data")
    if not isinstance(root, dict) or not root:
        return None

    entry = next(iter(root.values()))
    if isinstance(entry, list):
        entry = _first(entry)

    return to_positive_float(_get(_get(_get(entry, "quote"), "USD"), "price"))


def usd_value(raw_amount: str, decimals: int, price_usd: Optional[float]) -> Optional[float]:
    """Convert a raw on-chain amount into USD, or None when it cannot be priced."""
    if price_usd is None:
        return None
    try:
        raw = float(raw_amount)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(raw):
        return None
    units = raw / (10 ** decimals)
    if not math.isfinite(units):
        return None
    return units * price_usd


class PriceResolver(RestClient):
    """Cached USD prices for chain tokens and the native asset."""

    def __init__(
        self,
        pools_api_url: str,
        cmc_base_url: str,
        cmc_api_key: str = "",
        cmc_id: str = "",
        cmc_symbol: str = "ZIG",
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10,
        ttl: float = PRICE_TTL,
        cache: Optional[TTLCache] = None,
    ):
        super().__init__(session=session, timeout=timeout)
        self.pools_api_url = pools_api_url.rstrip("/")
        self.cmc_base_url = cmc_base_url.rstrip("/")
        self.cmc_api_key = cmc_api_key
        self.cmc_id = cmc_id
        self.cmc_symbol = cmc_symbol
        self.cache: TTLCache[Optional[float]] = cache if cache is not None else TTLCache(default_ttl=ttl)

    async def token_price_usd(self, denom: str) -> Optional[float]:
        key = f"token:{denom}"
        cached = self.cache.get(key)
        if cached is not MISSING:
            return cached

        try:
            url = f"{self.pools_api_url}/tokens/{quote(denom, safe='')}/pools"
            price = extract_price_usd(await self._fetch_json(url))
        except Exception as e:
            logger.debug(f"Token price lookup failed for {denom}: {e}")
            price = None

        self.cache.set(key, price)
        return price

    async def native_price_usd(self) -> Optional[float]:
        key = f"cmc:{self.cmc_id or self.cmc_symbol}"
        cached = self.cache.get(key)
        if cached is not MISSING:
            return cached

        if not self.cmc_api_key:
            self.cache.set(key, None)
            return None

        params = {"convert": "USD"}
        if self.cmc_id:
            params["id"] = self.cmc_id
        else:
            params["symbol"] = self.cmc_symbol

        try:
            data = await self._fetch_json(
                f"{self.cmc_base_url}/v1/cryptocurrency/quotes/latest",
                params=params,
                headers={
                    "X-CMC_PRO_API_KEY": self.cmc_api_key,
                    "Accept": "application/json",
                },
            )
            price = extract_cmc_quote(data)
        except Exception as e:
            logger.warning(f"CoinMarketCap quote lookup failed: {e}")
            price = None

        self.cache.set(key, price)
        return price
