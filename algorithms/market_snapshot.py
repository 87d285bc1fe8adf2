"""
Normalized market snapshot used by the detection algorithms.

The Gamma API is inconsistent about types: ``outcomes`` and ``outcomePrices``
arrive as JSON-encoded strings, prices as decimal strings, volume as a string
or a number. ``MarketSnapshot.from_api`` absorbs all of that so the detectors
only ever see floats and lists.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from utils.helpers import parse_json_list, safe_float


@dataclass(frozen=True)
class MarketSnapshot:
    """A tradable market and its outcome prices at one point in time."""

    id: str
    name: str
    outcomes: Tuple[str, ...] = ()
    outcome_prices: Tuple[float, ...] = ()
    volume: float = 0.0
    liquidity: float = 0.0
    slug: Optional[str] = None
    active: bool = True
    closed: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def price_sum(self) -> float:
        """Sum of all outcome prices (1.0 for a perfectly priced book)."""
        return sum(self.outcome_prices)

    @property
    def first_price(self) -> Optional[float]:
        return self.outcome_prices[0] if self.outcome_prices else None

    @classmethod
    def from_api(cls, market: Dict[str, Any]) -> "MarketSnapshot":
        """
        Build a snapshot from a raw Gamma API market dictionary.

        Unparseable prices become 0.0 rather than failing the whole batch.

        Args:
            market: Market dictionary as returned by /markets or /events

        Returns:
            MarketSnapshot
        """
        outcomes = tuple(str(o) for o in parse_json_list(market.get("outcomes")))
        prices = tuple(safe_float(p) for p in parse_json_list(market.get("outcomePrices")))

        # Links resolve to the parent event when there is one
        events = market.get("events")
        if not isinstance(events, list):
            events = []
        if events and isinstance(events[0], dict) and events[0].get("slug"):
            slug = events[0]["slug"]
        else:
            slug = market.get("slug") or market.get("custom_slug") or market.get("id")

        return cls(
            id=str(market.get("id", "")),
            name=market.get("question") or market.get("title") or "",
            outcomes=outcomes,
            outcome_prices=prices,
            volume=max(safe_float(market.get("volume")), 0.0),
            liquidity=max(safe_float(market.get("liquidity")), 0.0),
            slug=str(slug) if slug else None,
            active=bool(market.get("active", True)),
            closed=bool(market.get("closed", False)),
            raw=market,
        )


def normalize_markets(markets: List[Dict[str, Any]]) -> List[MarketSnapshot]:
    """Normalize a list of raw API markets, skipping non-dict entries."""
    return [MarketSnapshot.from_api(m) for m in markets if isinstance(m, dict)]
