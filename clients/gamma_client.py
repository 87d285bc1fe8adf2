"""
Gamma API Client for Polymarket market data.
Fetches active markets and resolves markets by slug.
"""

import aiohttp
import asyncio
from typing import Dict, List, Optional, Any
import logging

import config
from algorithms.market_snapshot import MarketSnapshot, normalize_markets

logger = logging.getLogger(__name__)


class GammaClient:
    """Client for Polymarket Gamma API - Core Market Data."""

    BASE_URL = config.GAMMA_API_BASE_URL

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the Gamma API client.

        Args:
            session: Optional aiohttp session for connection pooling
        """
        self.session = session
        self._own_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._own_session:
            timeout = aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._own_session and self.session:
            await self.session.close()

    async def _request(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        """
        Make an async GET request to the Gamma API.

        Args:
            endpoint: API endpoint path
            params: Query parameters

        Returns:
            JSON response data
        """
        url = f"{self.BASE_URL}{endpoint}"

        try:
            async with self.session.get(url, params=params) as response:
                response.raise_for_status()
                return await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"API request failed: {e}")
            raise

    async def get_markets(
        self,
        limit: int = 50,
        offset: int = 0,
        active: Optional[bool] = None,
        closed: Optional[bool] = None,
        order_by: str = "volume24hr",
        ascending: bool = False,
        slug: Optional[str] = None
    ) -> List[Dict]:
        """
        Fetch raw markets with optional filters.

        Args:
            limit: Number of markets to return (default 50)
            offset: Pagination offset (default 0)
            active: Filter by active status
            closed: Filter by closed status
            order_by: Sort field (volume24hr, liquidity, etc.)
            ascending: Sort direction
            slug: Exact market slug

        Returns:
            List of market dictionaries
        """
        params = {
            "limit": limit,
            "offset": offset,
            "order": order_by,
            "ascending": str(ascending).lower()
        }

        if active is not None:
            params["active"] = str(active).lower()
        if closed is not None:
            params["closed"] = str(closed).lower()
        if slug:
            params["slug"] = slug

        logger.debug(f"Fetching markets with params: {params}")
        data = await self._request("/markets", params)
        return data if isinstance(data, list) else []

    async def get_events(self, slug: str) -> List[Dict]:
        """
        Fetch events (collections of related markets) by slug.

        Args:
            slug: Event slug

        Returns:
            List of event dictionaries
        """
        data = await self._request("/events", {"slug": slug})
        return data if isinstance(data, list) else []

    async def get_active_markets(self, limit: int = config.DEFAULT_MARKETS_LIMIT) -> List[MarketSnapshot]:
        """
        Get active, open markets ordered by 24h volume.

        Network failures are logged and reported as an empty list so the
        caller can show an offline state.

        Args:
            limit: Number of markets to request

        Returns:
            Normalized market snapshots, most traded first
        """
        try:
            markets = await self.get_markets(limit=limit, active=True, closed=False)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Market synchronization offline: {e}")
            return []

        active = [m for m in markets if isinstance(m, dict) and m.get("active") is True]
        logger.info(f"Fetched {len(active)} active markets")
        return normalize_markets(active)

    async def get_market_by_slug(self, slug: str) -> Optional[MarketSnapshot]:
        """
        Resolve a market from a market or event slug.

        Tries the market slug, then the event slug, then the event slug
        with its last dash-separated segment removed (Polymarket URLs often
        carry a per-market suffix).

        Args:
            slug: Market or event slug

        Returns:
            MarketSnapshot, or None if nothing matches
        """
        logger.info(f"Resolving market: {slug}")
        try:
            markets = await self.get_markets(limit=1, slug=slug)
            if markets:
                return MarketSnapshot.from_api(markets[0])

            candidates = [slug]
            parts = slug.split("-")
            if len(parts) > 1:
                candidates.append("-".join(parts[:-1]))

            for event_slug in candidates:
                market = self._best_event_market(await self.get_events(event_slug))
                if market:
                    return MarketSnapshot.from_api(market)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Market/Event lookup failed: {slug}: {e}")
        return None

    @staticmethod
    def _best_event_market(events: List[Dict]) -> Optional[Dict]:
        """Pick the first active market of the first event, else its first market."""
        if not events or not isinstance(events[0], dict):
            return None
        markets = events[0].get("markets") or []
        if not markets:
            return None
        return next((m for m in markets if m.get("active")), markets[0])
