"""
Tests for the bounded alert ledger.
"""

import pytest
from algorithms.whale_sampler import Side, TradeAlert
from data.alert_ledger import AlertLedger


def make_alert(n: int) -> TradeAlert:
    return TradeAlert(
        id=f"alert-{n}",
        market_id="m1",
        market_name="Will this test pass?",
        side=Side.BUY,
        size=50_000.0,
        price=0.5,
        address="0x" + "1" * 40
    )


class TestAlertLedger:
    """Test suite for AlertLedger."""

    def test_starts_empty(self):
        ledger = AlertLedger(5)
        assert len(ledger) == 0
        assert ledger.all() == ()
        assert not ledger
        assert ledger.latest() is None

    def test_push_prepends(self):
        ledger = AlertLedger(5).push(make_alert(1)).push(make_alert(2))

        assert [a.id for a in ledger.all()] == ["alert-2", "alert-1"]
        assert ledger.latest().id == "alert-2"

    def test_push_is_immutable(self):
        """Pushing returns a new ledger and leaves the original unchanged."""
        original = AlertLedger(5).push(make_alert(1))
        updated = original.push(make_alert(2))

        assert len(original) == 1
        assert len(updated) == 2
        assert updated is not original

    def test_capacity_drops_oldest(self):
        ledger = AlertLedger(3)
        for n in range(5):
            ledger = ledger.push(make_alert(n))

        assert len(ledger) == 3
        assert [a.id for a in ledger] == ["alert-4", "alert-3", "alert-2"]

    @pytest.mark.parametrize("pushes,capacity", [(0, 3), (2, 3), (3, 3), (10, 3), (60, 50), (250, 200)])
    def test_length_is_min_of_pushes_and_capacity(self, pushes, capacity):
        """After N pushes the ledger holds min(N, C) alerts in reverse insertion order."""
        ledger = AlertLedger(capacity)
        for n in range(pushes):
            ledger = ledger.push(make_alert(n))

        assert len(ledger) == min(pushes, capacity)
        expected = [f"alert-{n}" for n in reversed(range(pushes))][:capacity]
        assert [a.id for a in ledger.all()] == expected

    def test_all_is_restartable(self):
        """Reading twice gives the same sequence."""
        ledger = AlertLedger(5).push(make_alert(1)).push(make_alert(2))
        assert list(ledger) == list(ledger)
        assert ledger.all() == ledger.all()

    def test_duplicates_kept(self):
        """Equal alerts are not merged."""
        alert = make_alert(1)
        ledger = AlertLedger(5).push(alert).push(alert)
        assert len(ledger) == 2

    def test_initial_alerts_truncated(self):
        ledger = AlertLedger(2, [make_alert(3), make_alert(2), make_alert(1)])
        assert [a.id for a in ledger] == ["alert-3", "alert-2"]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            AlertLedger(0)
        with pytest.raises(ValueError):
            AlertLedger(-5)

    def test_default_capacity(self):
        assert AlertLedger().capacity == 50
