"""
CoinGecko client for spot crypto prices shown next to the markets.
"""

import aiohttp
import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
import logging

import config
from utils.helpers import safe_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    id: str
    symbol: str
    price: float
    change_24h: float


class CryptoPriceClient:
    """Client for the CoinGecko simple price endpoint."""

    BASE_URL = config.COINGECKO_API_URL

    def __init__(self, session: Optional[aiohttp.ClientSession] = None,
                 assets: Optional[Dict[str, str]] = None):
        """
        Initialize the price client.

        Args:
            session: Optional aiohttp session for connection pooling
            assets: CoinGecko id -> display symbol (defaults to config.CRYPTO_ASSETS)
        """
        self.session = session
        self._own_session = session is None
        self.assets = assets or config.CRYPTO_ASSETS

    async def __aenter__(self):
        if self._own_session:
            timeout = aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_session and self.session:
            await self.session.close()

    async def _request(self, params: Dict) -> Any:
        try:
            async with self.session.get(self.BASE_URL, params=params) as response:
                response.raise_for_status()
                return await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"Price request failed: {e}")
            raise

    def parse_prices(self, data: Any) -> List[PriceQuote]:
        """
        Convert a CoinGecko response into quotes, skipping missing coins.

        Args:
            data: JSON body, e.g. {"bitcoin": {"usd": 1.0, "usd_24h_change": 2.0}}

        Returns:
            Quotes in configured asset order
        """
        if not isinstance(data, dict):
            return []

        quotes = []
        for coin_id, symbol in self.assets.items():
            entry = data.get(coin_id)
            if not isinstance(entry, dict) or "usd" not in entry:
                continue
            quotes.append(PriceQuote(
                id=coin_id,
                symbol=symbol,
                price=safe_float(entry.get("usd")),
                change_24h=safe_float(entry.get("usd_24h_change")),
            ))
        return quotes

    async def get_prices(self) -> List[PriceQuote]:
        """
        Fetch current USD prices and 24h change.

        Returns:
            List of quotes, empty on failure
        """
        params = {
            "ids": ",".join(self.assets),
            "vs_currencies": "usd",
            "include_24hr_change": "true"
        }
        try:
            data = await self._request(params)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Price synchronization failed: {e}")
            return []
        return self.parse_prices(data)
