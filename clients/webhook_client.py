"""
Discord webhook delivery for whale alerts.

Delivery is best effort: ``send_alert`` returns False on any failure and
never raises, so a broken webhook cannot interrupt detection.
"""

import aiohttp
import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional
import logging

import config
from algorithms.market_snapshot import MarketSnapshot
from algorithms.whale_sampler import Side, TradeAlert
from utils.helpers import market_url

logger = logging.getLogger(__name__)

BUY_COLOR = 3066993
SELL_COLOR = 15158332


def build_embed(alert: TradeAlert, market: Optional[MarketSnapshot] = None) -> Dict:
    """
    Build the Discord embed for an alert.

    Args:
        alert: Trade alert
        market: Originating market, used for the link when known

    Returns:
        Embed dictionary
    """
    return {
        "title": f"🚨 WHALE ACTIVITY DETECTED: {alert.side.value}",
        "description": (
            f"**Market:** {alert.market_name}\n"
            f"**Size:** ${alert.size:,.0f} USDC\n"
            f"**Price:** {alert.price:.3f} USDC"
        ),
        "url": market_url(market.slug if market else None),
        "color": BUY_COLOR if alert.side == Side.BUY else SELL_COLOR,
        "fields": [
            {"name": "Address", "value": f"`{alert.address}`", "inline": False},
            {
                "name": "Timestamp",
                "value": alert.timestamp.strftime("%a, %d %b %Y %H:%M:%S UTC"),
                "inline": True
            },
            {"name": "Network", "value": "Polygon/Mainnet", "inline": True}
        ],
        "footer": {"text": "PolyPulse | Flow Monitor"},
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


class DiscordNotifier:
    """Posts trade alerts to a Discord webhook."""

    def __init__(self, webhook_url: str = config.DISCORD_WEBHOOK_URL,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the notifier.

        Args:
            webhook_url: Discord webhook URL (empty disables delivery)
            session: Optional aiohttp session for connection pooling
        """
        self.webhook_url = webhook_url
        self.session = session
        self._own_session = session is None

    async def __aenter__(self):
        if self._own_session:
            timeout = aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_session and self.session:
            await self.session.close()

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url) and self.webhook_url.startswith(config.DISCORD_URL_PREFIX)

    async def send_alert(self, alert: TradeAlert, market: Optional[MarketSnapshot] = None) -> bool:
        """
        Deliver an alert.

        Args:
            alert: Trade alert
            market: Originating market, if known

        Returns:
            True if Discord accepted the message
        """
        if not self.enabled:
            logger.debug("Discord webhook not configured, skipping alert")
            return False

        payload = {"embeds": [build_embed(alert, market)]}
        try:
            async with self.session.post(self.webhook_url, json=payload) as response:
                if response.status >= 400:
                    logger.error(f"Failed to send Discord alert: Discord API responded with {response.status}")
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to send Discord alert: {e}")
            return False

        logger.info(f"Discord notification dispatched: {alert.id}")
        return True
