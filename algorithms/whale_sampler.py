"""
Whale trade alerts and synthetic trade flow.

There is no public feed of individual large fills, so alerts are sampled
from the market list: pick one of the most liquid markets, derive a
plausible notional at or above a volume-scaled floor, and hand the result
to the caller. Filtering against the user's threshold is a separate step
(``is_alert_worthy``) so sampling stays independent of settings.

All randomness flows through an injected ``random.Random`` so tests can
seed it. ``SyntheticTradeFlow`` bundles the sampler with the other
synthetic data the dashboard needs (per-market tape, wallet stats) behind
the ``TradeFlowProvider`` interface; a live implementation backed by a
real trade feed can replace it without touching the callers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Protocol, Sequence
import random
import string

import config
from algorithms.market_snapshot import MarketSnapshot

_ID_ALPHABET = string.ascii_lowercase + string.digits

# Shorter strings cannot be wallet addresses
MIN_ADDRESS_LENGTH = 10

# Used for wallet history when no live markets are loaded
_FALLBACK_MARKETS = (
    MarketSnapshot(id="btc-100k", name="Will Bitcoin reach $100k by March?",
                   outcomes=("Yes", "No"), outcome_prices=(0.64, 0.36)),
    MarketSnapshot(id="fed-rates", name="Fed interest rate decision March",
                   outcomes=("Yes", "No"), outcome_prices=(0.88, 0.12)),
    MarketSnapshot(id="election-2024", name="US Presidential Election 2024 Winner",
                   outcomes=("Yes", "No"), outcome_prices=(0.52, 0.48)),
)


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class WalletTier(str, Enum):
    WHALE = "WHALE"
    SMART_MONEY = "SMART_MONEY"
    RETAIL = "RETAIL"
    BOT = "BOT"


@dataclass(frozen=True)
class TradeAlert:
    """A single large trade observed (or sampled) on a market."""

    id: str
    market_id: str
    market_name: str
    side: Side
    size: float
    price: float
    address: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class AddressStats:
    address: str
    win_rate: float
    total_volume: float
    total_trades: int
    pnl: float
    tier: WalletTier
    last_active: datetime


def _random_id(rng: random.Random, length: int = 9) -> str:
    return "".join(rng.choice(_ID_ALPHABET) for _ in range(length))


def _random_address(rng: random.Random) -> str:
    return f"0x{rng.getrandbits(160):040x}"


def size_floor(market: MarketSnapshot) -> int:
    """Minimum sampled trade size for a market, scaled by its volume."""
    if market.volume > config.WHALE_HIGH_VOLUME_CUTOFF:
        return config.WHALE_FLOOR_HIGH_VOLUME
    return config.WHALE_FLOOR_DEFAULT


def sample_whale_alert(
    markets: Sequence[MarketSnapshot],
    threshold: float = config.DEFAULT_WHALE_THRESHOLD,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None
) -> Optional[TradeAlert]:
    """
    Produce one whale trade candidate from the most liquid markets.

    Args:
        markets: Markets ordered by liquidity/volume, most liquid first
        threshold: User alert threshold. Accepted for interface symmetry
            with the live provider; use ``is_alert_worthy`` to apply it.
        rng: Randomness source (defaults to a fresh unseeded Random)
        now: Alert timestamp (defaults to current UTC time)

    Returns:
        TradeAlert, or None when there are no markets
    """
    if not markets:
        return None

    rng = rng or random.Random()
    window = min(len(markets), config.WHALE_CANDIDATE_WINDOW)
    target = markets[rng.randrange(window)]

    price = target.first_price
    return TradeAlert(
        id=_random_id(rng),
        market_id=target.id,
        market_name=target.name,
        side=Side.BUY if rng.random() > 0.5 else Side.SELL,
        size=float(size_floor(target) + rng.randrange(100_000)),
        price=0.5 if price is None else price,
        address=_random_address(rng),
        timestamp=now or datetime.now(timezone.utc),
    )


def is_alert_worthy(alert: Optional[TradeAlert], threshold: float) -> bool:
    """Check whether a sampled trade is large enough to notify about."""
    return alert is not None and alert.size > threshold


class TradeFlowProvider(Protocol):
    """Source of trade-level data for the dashboard."""

    def sample_alert(self, markets: Sequence[MarketSnapshot]) -> Optional[TradeAlert]:
        ...

    def market_trades(self, market: MarketSnapshot, count: int = 12) -> List[TradeAlert]:
        ...

    def address_trades(self, address: str, markets: Sequence[MarketSnapshot] = (),
                       count: int = 5) -> List[TradeAlert]:
        ...

    def address_stats(self, address: str) -> AddressStats:
        ...


class SyntheticTradeFlow:
    """Seeded stand-in for a real trade feed."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        """
        Initialize the provider.

        Args:
            seed: Seed for a private Random instance
            rng: Existing Random to use instead (takes precedence over seed)
        """
        self.rng = rng or random.Random(seed)

    def sample_alert(self, markets: Sequence[MarketSnapshot]) -> Optional[TradeAlert]:
        return sample_whale_alert(markets, rng=self.rng)

    def market_trades(self, market: MarketSnapshot, count: int = 12) -> List[TradeAlert]:
        """
        Generate a recent tape for one market, newest first.

        Roughly three in ten trades are whale sized (50k to 200k),
        the rest are retail sized (500 to 5.5k).
        """
        now = datetime.now(timezone.utc)
        trades = []
        for i in range(count):
            is_whale = self.rng.random() > 0.7
            if is_whale:
                size = 50_000 + self.rng.random() * 150_000
            else:
                size = 500 + self.rng.random() * 5_000
            age = timedelta(milliseconds=i * self.rng.random() * 600_000)
            trades.append(TradeAlert(
                id=_random_id(self.rng),
                market_id=market.id,
                market_name=market.name,
                side=Side.BUY if self.rng.random() > 0.5 else Side.SELL,
                size=size,
                price=0.1 + self.rng.random() * 0.8,
                address=_random_address(self.rng),
                timestamp=now - age,
            ))
        trades.sort(key=lambda t: t.timestamp, reverse=True)
        return trades

    def address_trades(
        self,
        address: str,
        markets: Sequence[MarketSnapshot] = (),
        count: int = 5,
        now: Optional[datetime] = None
    ) -> List[TradeAlert]:
        """
        Recent trades made by one wallet, newest first.

        The history is seeded from the address, so a wallet shows the same
        trades on every render.

        Args:
            address: Wallet address
            markets: Markets to attribute trades to (most liquid first);
                a small built-in set is used when empty
            count: Number of trades
            now: Reference time for the newest trade

        Returns:
            List of trades, empty for strings too short to be an address
        """
        if not address or len(address) < MIN_ADDRESS_LENGTH:
            return []

        rng = random.Random(address.lower())
        pool = list(markets[:config.WHALE_CANDIDATE_WINDOW]) or list(_FALLBACK_MARKETS)
        now = now or datetime.now(timezone.utc)

        trades = []
        age = timedelta()
        for _ in range(count):
            market = pool[rng.randrange(len(pool))]
            if rng.random() > 0.75:
                size = 100_000 + rng.random() * 75_000
            else:
                size = 5_000 + rng.random() * 15_000
            price = market.first_price
            trades.append(TradeAlert(
                id=_random_id(rng),
                market_id=market.id,
                market_name=market.name,
                side=Side.BUY if rng.random() > 0.5 else Side.SELL,
                size=size,
                price=0.1 + rng.random() * 0.8 if price is None else price,
                address=address,
                timestamp=now - age,
            ))
            age += timedelta(minutes=10 + rng.random() * 1430)
        return trades

    def address_stats(self, address: str) -> AddressStats:
        """
        Derive stable pseudo stats for a wallet from its address string.

        The same address always maps to the same numbers.
        """
        lowered = address.lower()
        seed = ord(lowered[10]) if len(lowered) > 10 else 0
        is_whale = seed % 10 == 0

        win_rate = 0.45 + (seed % 25) / 100
        if is_whale:
            total_volume = 2_500_000 + seed * 10_000
        else:
            total_volume = 15_000 + seed * 500

        return AddressStats(
            address=address,
            win_rate=win_rate,
            total_volume=float(total_volume),
            total_trades=100 + seed % 400,
            pnl=total_volume * (win_rate - 0.45),
            tier=WalletTier.WHALE if is_whale else WalletTier.SMART_MONEY,
            last_active=datetime.now(timezone.utc),
        )
