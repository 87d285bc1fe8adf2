"""
Outcome-sum arbitrage detection.

For a mutually exclusive outcome set exactly one outcome pays $1, so the
outcome prices should sum to 1.0. A book that sums well below 1.0 can be
bought in full for a guaranteed profit; one that sums well above 1.0 only
suggests selling pressure. Anything outside the tolerance band is flagged.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional
import logging

import config
from algorithms.market_snapshot import MarketSnapshot

logger = logging.getLogger(__name__)


class ArbitrageKind(str, Enum):
    SUM_DISCREPANCY = "SUM_DISCREPANCY"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class ArbitrageSignal:
    """A market whose outcome prices are internally inconsistent."""

    market_id: str
    market_name: str
    kind: ArbitrageKind
    severity: Severity
    expected_return: float  # percent
    description: str


@dataclass(frozen=True)
class DetectorConfig:
    """Thresholds for the outcome-sum check."""

    lower_bound: float = config.ARB_LOWER_BOUND
    upper_bound: float = config.ARB_UPPER_BOUND
    high_severity_below: float = config.ARB_HIGH_SEVERITY_BELOW
    max_signals: int = config.ARB_MAX_SIGNALS
    # Markets with fewer outcomes (or prices) than this are never flagged.
    # 0 disables the check, so an empty price list sums to 0 and flags HIGH.
    min_outcomes: int = config.ARB_MIN_OUTCOMES


DEFAULT_CONFIG = DetectorConfig()


def is_eligible(market: MarketSnapshot, settings: DetectorConfig = DEFAULT_CONFIG) -> bool:
    """Check that a market has enough priced outcomes to be compared against 1.0."""
    return (
        len(market.outcomes) >= settings.min_outcomes
        and len(market.outcome_prices) >= settings.min_outcomes
    )


def check_single_market_arbitrage(
    market: MarketSnapshot,
    settings: DetectorConfig = DEFAULT_CONFIG
) -> Optional[ArbitrageSignal]:
    """
    Apply the outcome-sum rule to one market.

    Args:
        market: Market snapshot
        settings: Detection thresholds

    Returns:
        ArbitrageSignal, or None when the book is within tolerance
        or the market is not eligible
    """
    if not is_eligible(market, settings):
        return None

    total = market.price_sum
    if settings.lower_bound <= total <= settings.upper_bound:
        return None

    severity = Severity.HIGH if total < settings.high_severity_below else Severity.MEDIUM
    return ArbitrageSignal(
        market_id=market.id,
        market_name=market.name,
        kind=ArbitrageKind.SUM_DISCREPANCY,
        severity=severity,
        expected_return=abs(1 - total) * 100,
        description=(
            f"Market outcomes sum to {total * 100:.1f}%. "
            f"Inefficient book liquidity detected."
        ),
    )


def detect_arbitrage(
    markets: Iterable[MarketSnapshot],
    settings: DetectorConfig = DEFAULT_CONFIG
) -> List[ArbitrageSignal]:
    """
    Scan a batch of markets and return the largest mispricings.

    Args:
        markets: Market snapshots, in feed order
        settings: Detection thresholds

    Returns:
        At most ``settings.max_signals`` signals sorted by expected return,
        largest first. Ties keep input order.
    """
    seen = set()
    signals = []

    for market in markets:
        if market.id in seen:
            continue
        seen.add(market.id)

        signal = check_single_market_arbitrage(market, settings)
        if signal:
            signals.append(signal)

    signals.sort(key=lambda s: s.expected_return, reverse=True)
    if signals:
        logger.debug(f"Flagged {len(signals)} markets, keeping top {settings.max_signals}")
    return signals[:settings.max_signals]
