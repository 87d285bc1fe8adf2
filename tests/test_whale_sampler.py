"""
Tests for whale alert sampling and the synthetic trade flow.
"""

import random
import pytest
from datetime import datetime, timezone
from algorithms.market_snapshot import MarketSnapshot
from algorithms.whale_sampler import (
    Side,
    SyntheticTradeFlow,
    TradeAlert,
    WalletTier,
    is_alert_worthy,
    sample_whale_alert,
    size_floor,
)


def make_market(market_id: str, volume: float, prices=(0.62, 0.38)) -> MarketSnapshot:
    return MarketSnapshot(
        id=market_id,
        name=f"Market {market_id}?",
        outcomes=("Yes", "No")[:len(prices)],
        outcome_prices=tuple(prices),
        volume=volume
    )


class TestSizeFloor:
    """Test the volume-scaled minimum trade size."""

    def test_high_volume_floor(self):
        assert size_floor(make_market("a", 2_000_000)) == 50_000

    def test_default_floor(self):
        assert size_floor(make_market("a", 500_000)) == 10_000

    def test_cutoff_is_exclusive(self):
        """Exactly 1M volume uses the lower floor."""
        assert size_floor(make_market("a", 1_000_000)) == 10_000


class TestSampleWhaleAlert:
    """Test single alert sampling."""

    def test_empty_markets_returns_none(self):
        for threshold in (0, 1, 25_000, 1e12):
            assert sample_whale_alert([], threshold, rng=random.Random(1)) is None

    def test_size_at_or_above_floor(self):
        """Every sampled size respects the chosen market's floor."""
        markets = [make_market(f"m{i}", 2_000_000 if i % 2 else 10_000) for i in range(30)]
        by_id = {m.id: m for m in markets}
        rng = random.Random(42)

        for _ in range(500):
            alert = sample_whale_alert(markets, rng=rng)
            assert alert.size >= size_floor(by_id[alert.market_id])
            assert alert.size < size_floor(by_id[alert.market_id]) + 100_000

    def test_candidate_window_is_top_twenty(self):
        """Only the first 20 markets are ever picked."""
        markets = [make_market(f"m{i}", 0) for i in range(50)]
        rng = random.Random(7)

        picked = {sample_whale_alert(markets, rng=rng).market_id for _ in range(500)}

        assert picked <= {f"m{i}" for i in range(20)}

    def test_small_market_list(self):
        markets = [make_market("only", 0)]
        alert = sample_whale_alert(markets, rng=random.Random(3))
        assert alert.market_id == "only"
        assert alert.market_name == "Market only?"

    def test_price_from_first_outcome(self):
        alert = sample_whale_alert([make_market("a", 0)], rng=random.Random(1))
        assert alert.price == 0.62

    def test_price_defaults_without_outcomes(self):
        alert = sample_whale_alert([make_market("a", 0, prices=())], rng=random.Random(1))
        assert alert.price == 0.5

    def test_alert_shape(self):
        """Alerts carry a side, an id and a 0x address."""
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        alert = sample_whale_alert([make_market("a", 0)], rng=random.Random(5), now=now)

        assert isinstance(alert, TradeAlert)
        assert alert.side in (Side.BUY, Side.SELL)
        assert len(alert.id) == 9
        assert alert.address.startswith("0x")
        assert len(alert.address) == 42
        assert alert.timestamp == now

    def test_seeded_rng_is_deterministic(self):
        markets = [make_market(f"m{i}", 0) for i in range(10)]
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)

        first = sample_whale_alert(markets, rng=random.Random(99), now=now)
        second = sample_whale_alert(markets, rng=random.Random(99), now=now)

        assert first == second

    def test_threshold_not_applied_by_sampler(self):
        """Sampling ignores the threshold; filtering is separate."""
        alert = sample_whale_alert([make_market("a", 0)], threshold=1e12, rng=random.Random(1))
        assert alert is not None
        assert is_alert_worthy(alert, 1e12) is False


class TestIsAlertWorthy:

    def test_strictly_greater(self):
        alert = TradeAlert("id", "m", "Market", Side.BUY, 25_000.0, 0.5, "0xabc")
        assert is_alert_worthy(alert, 24_999) is True
        assert is_alert_worthy(alert, 25_000) is False

    def test_none_is_not_worthy(self):
        assert is_alert_worthy(None, 0) is False


class TestSyntheticTradeFlow:
    """Test the seeded trade flow provider."""

    def test_sample_alert_uses_provider_rng(self):
        markets = [make_market(f"m{i}", 0) for i in range(5)]
        a = SyntheticTradeFlow(seed=11).sample_alert(markets)
        b = SyntheticTradeFlow(seed=11).sample_alert(markets)
        assert (a.market_id, a.size, a.side) == (b.market_id, b.size, b.side)

    def test_sample_alert_empty(self):
        assert SyntheticTradeFlow(seed=1).sample_alert([]) is None

    def test_market_trades_newest_first(self):
        trades = SyntheticTradeFlow(seed=3).market_trades(make_market("m", 0), count=12)

        assert len(trades) == 12
        timestamps = [t.timestamp for t in trades]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_market_trades_ranges(self):
        trades = SyntheticTradeFlow(seed=4).market_trades(make_market("m", 0), count=200)

        for trade in trades:
            assert trade.market_id == "m"
            assert 0.1 <= trade.price <= 0.9
            assert 500 <= trade.size < 5_500 or 50_000 <= trade.size < 200_000

    def test_address_stats_deterministic(self):
        flow_a = SyntheticTradeFlow(seed=1)
        flow_b = SyntheticTradeFlow(seed=2)
        address = "0x1234567890abcdef1234567890abcdef12345678"

        a = flow_a.address_stats(address)
        b = flow_b.address_stats(address)

        assert (a.win_rate, a.total_volume, a.tier) == (b.win_rate, b.total_volume, b.tier)

    def test_address_stats_whale_tier(self):
        """Character 'd' (100) at index 10 maps to the whale tier."""
        stats = SyntheticTradeFlow().address_stats("0x12345678d0000000000000000000000000000000")

        assert stats.tier == WalletTier.WHALE
        assert stats.total_volume == 2_500_000 + 100 * 10_000
        assert stats.win_rate == pytest.approx(0.45)
        assert stats.total_trades == 200
        assert stats.pnl == pytest.approx(0.0)

    def test_address_stats_smart_money_tier(self):
        """Character 'a' (97) at index 10 maps to smart money."""
        stats = SyntheticTradeFlow().address_stats("0x12345678a0000000000000000000000000000000")

        assert stats.tier == WalletTier.SMART_MONEY
        assert stats.win_rate == pytest.approx(0.45 + 22 / 100)
        assert stats.total_volume == 15_000 + 97 * 500
        assert stats.total_trades == 197
        assert stats.pnl == pytest.approx(stats.total_volume * 0.22)

    def test_address_stats_case_insensitive(self):
        flow = SyntheticTradeFlow()
        upper = flow.address_stats("0x12345678A0000000000000000000000000000000")
        lower = flow.address_stats("0x12345678a0000000000000000000000000000000")
        assert upper.total_volume == lower.total_volume

    def test_short_address_seed_zero(self):
        stats = SyntheticTradeFlow().address_stats("0x123")
        assert stats.tier == WalletTier.WHALE
        assert stats.total_volume == 2_500_000


class TestAddressTrades:
    """Test the per-wallet trade history."""

    ADDRESS = "0x1234567890abcdef1234567890abcdef12345678"

    def test_short_address_has_no_history(self):
        flow = SyntheticTradeFlow(seed=1)
        assert flow.address_trades("") == []
        assert flow.address_trades("0x12345") == []

    def test_history_newest_first(self):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        trades = SyntheticTradeFlow().address_trades(self.ADDRESS, count=6, now=now)

        assert len(trades) == 6
        assert trades[0].timestamp == now
        timestamps = [t.timestamp for t in trades]
        assert timestamps == sorted(timestamps, reverse=True)
        assert len(set(timestamps)) == 6

    def test_trades_attributed_to_address(self):
        trades = SyntheticTradeFlow().address_trades(self.ADDRESS)
        assert all(t.address == self.ADDRESS for t in trades)

    def test_same_address_same_history(self):
        now = datetime(2025, 3, 1, tzinfo=timezone.utc)
        a = SyntheticTradeFlow(seed=1).address_trades(self.ADDRESS, now=now)
        b = SyntheticTradeFlow(seed=2).address_trades(self.ADDRESS.upper().replace("0X", "0x"), now=now)

        assert [(t.market_id, t.size, t.side) for t in a] == [(t.market_id, t.size, t.side) for t in b]

    def test_uses_given_markets(self):
        markets = [make_market("live-1", 0, prices=(0.3, 0.7)), make_market("live-2", 0, prices=(0.8, 0.2))]
        trades = SyntheticTradeFlow().address_trades(self.ADDRESS, markets, count=20)

        for trade in trades:
            assert trade.market_id in {"live-1", "live-2"}
            assert trade.price in (0.3, 0.8)

    def test_builtin_markets_without_feed(self):
        trades = SyntheticTradeFlow().address_trades(self.ADDRESS, count=20)

        assert {t.market_id for t in trades} <= {"btc-100k", "fed-rates", "election-2024"}
        for trade in trades:
            assert 5_000 <= trade.size < 20_000 or 100_000 <= trade.size < 175_000
