"""
PolyPulse Flow Monitor - headless market surveillance.
Polls markets and spot prices, flags outcome-sum arbitrage, samples whale
trades into the alert feed and forwards large ones to Discord.

Usage:
    python flow_monitor.py                    # Run until Ctrl+C
    python flow_monitor.py --once             # Single pass, then exit
    python flow_monitor.py --threshold 50000  # Override whale threshold for this run
"""

import argparse
import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional
import logging
import sys

from colorama import Fore, Style, init

import config
from algorithms.arbitrage_detector import (
    ArbitrageSignal,
    DetectorConfig,
    DEFAULT_CONFIG,
    Severity,
    detect_arbitrage,
)
from algorithms.market_snapshot import MarketSnapshot
from algorithms.whale_sampler import (
    Side,
    SyntheticTradeFlow,
    TradeAlert,
    TradeFlowProvider,
    is_alert_worthy,
)
from clients.crypto_client import CryptoPriceClient, PriceQuote
from clients.gamma_client import GammaClient
from clients.webhook_client import DiscordNotifier
from data.alert_ledger import AlertLedger
from utils.helpers import format_currency, format_large_number, format_percentage, truncate_text
from utils.periodic import PeriodicTask
from utils.settings_store import SettingsStore

logger = logging.getLogger(__name__)

AlertListener = Callable[[TradeAlert, bool], None]


class FlowMonitor:
    """
    Polling loop around the detection core.

    All collaborators are injected so the monitor can run against fakes
    in tests and against the live APIs from the CLI or the dashboard.
    """

    def __init__(
        self,
        gamma: GammaClient,
        prices: CryptoPriceClient,
        notifier: DiscordNotifier,
        settings: SettingsStore,
        flow: Optional[TradeFlowProvider] = None,
        alert_capacity: int = config.ALERT_FEED_CAPACITY,
        markets_limit: int = config.DEFAULT_MARKETS_LIMIT,
        detector_config: DetectorConfig = DEFAULT_CONFIG,
        whale_threshold: Optional[float] = None
    ):
        self.gamma = gamma
        self.prices = prices
        self.notifier = notifier
        self.settings = settings
        self.flow = flow or SyntheticTradeFlow()
        self.markets_limit = markets_limit
        self.detector_config = detector_config
        # Session-only override, the stored setting is used when None
        self.whale_threshold = whale_threshold

        self.markets: List[MarketSnapshot] = []
        self.quotes: List[PriceQuote] = []
        self.arbitrage: List[ArbitrageSignal] = []
        self.alerts: AlertLedger[TradeAlert] = AlertLedger(alert_capacity)
        self.last_refresh: Optional[datetime] = None
        self.connection_error = False

        self._listeners: List[AlertListener] = []
        self._tasks: List[PeriodicTask] = []

    def subscribe(self, callback: AlertListener) -> Callable[[], None]:
        """
        Register a callback for new alerts.

        The callback receives the alert and whether it crossed the
        whale threshold.

        Returns:
            Function that removes the callback
        """
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def market_by_id(self, market_id: str) -> Optional[MarketSnapshot]:
        return next((m for m in self.markets if m.id == market_id), None)

    async def refresh(self):
        """Fetch markets and prices together, then recompute arbitrage."""
        markets, quotes = await asyncio.gather(
            self.gamma.get_active_markets(self.markets_limit),
            self.prices.get_prices()
        )

        self.connection_error = not markets
        if self.connection_error:
            logger.warning("No markets received, keeping previous snapshot")
        else:
            self.markets = markets
            self.arbitrage = detect_arbitrage(markets, self.detector_config)
        if quotes:
            self.quotes = quotes

        self.last_refresh = datetime.now(timezone.utc)
        logger.info(
            f"Sync complete: {len(self.markets)} markets, "
            f"{len(self.quotes)} prices, {len(self.arbitrage)} arbitrage signals"
        )

    async def sample_alert(self) -> Optional[TradeAlert]:
        """
        Sample one trade into the alert feed and dispatch it if large enough.

        Returns:
            The sampled alert, or None when no markets are loaded
        """
        if not self.markets:
            return None

        alert = self.flow.sample_alert(self.markets)
        if alert is None:
            return None

        self.alerts = self.alerts.push(alert)

        settings = self.settings.get_settings()
        threshold = settings.whale_threshold if self.whale_threshold is None else self.whale_threshold
        worthy = is_alert_worthy(alert, threshold)
        if worthy:
            logger.warning(f"LARGE_ORDER: {alert.side.value} {alert.size:,.0f} on {alert.market_name}")
            self.notifier.webhook_url = settings.discord_webhook_url
            await self.dispatch(alert, self.market_by_id(alert.market_id))

        for listener in list(self._listeners):
            try:
                listener(alert, worthy)
            except Exception as e:
                logger.error(f"Alert listener failed: {e}")

        return alert

    async def dispatch(self, alert: TradeAlert, market: Optional[MarketSnapshot]) -> bool:
        """Forward an alert to the notifier; failures are logged, never raised."""
        try:
            return await self.notifier.send_alert(alert, market)
        except Exception as e:
            logger.error(f"Notification dispatch failed for {alert.id}: {e}")
            return False

    def start(self, refresh_interval: Optional[float] = None,
              sample_interval: float = config.ALERT_SAMPLE_INTERVAL):
        """
        Start the refresh and sampling loops on the running event loop.

        Args:
            refresh_interval: Seconds between market syncs
                (defaults to the stored auto-refresh setting)
            sample_interval: Seconds between whale samples
        """
        if refresh_interval is None:
            refresh_interval = self.settings.get_settings().auto_refresh_interval / 1000
        self._tasks = [
            PeriodicTask(refresh_interval, self.refresh, name="market-refresh", run_immediately=True),
            PeriodicTask(sample_interval, self.sample_alert, name="whale-sampler"),
        ]
        for task in self._tasks:
            task.start()

    async def stop(self):
        for task in self._tasks:
            await task.stop()
        self._tasks = []

    @property
    def running(self) -> bool:
        return any(task.running for task in self._tasks)


def print_arbitrage(signals: List[ArbitrageSignal]):
    """Print arbitrage signals as a compact table."""
    if not signals:
        print(f"{Style.DIM}No outcome-sum discrepancies outside tolerance{Style.RESET_ALL}")
        return

    print(f"\n{Style.BRIGHT}ARBITRAGE SIGNALS{Style.RESET_ALL}")
    for signal in signals:
        color = Fore.RED if signal.severity == Severity.HIGH else Fore.YELLOW
        print(
            f"  {color}{signal.severity.value:>6}{Style.RESET_ALL} "
            f"{Style.BRIGHT}{format_percentage(signal.expected_return):>7}{Style.RESET_ALL} | "
            f"{truncate_text(signal.market_name, 60)}"
        )


def print_alert(alert: TradeAlert, worthy: bool):
    """Print one alert line, highlighting those above threshold."""
    color = Fore.GREEN if alert.side == Side.BUY else Fore.RED
    marker = f"{Fore.YELLOW}{Style.BRIGHT}WHALE{Style.RESET_ALL}" if worthy else f"{Style.DIM}flow {Style.RESET_ALL}"
    print(
        f"[{Fore.CYAN}{alert.timestamp.strftime('%H:%M:%S')}{Style.RESET_ALL}] {marker} "
        f"{color}{Style.BRIGHT}{alert.side.value:>4}{Style.RESET_ALL} "
        f"{format_currency(alert.size, 0):>10} @ {alert.price:.3f} | "
        f"{truncate_text(alert.market_name, 50)}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PolyPulse headless flow monitor")
    parser.add_argument("--threshold", type=float, help="Whale alert threshold in USDC for this run (not saved)")
    parser.add_argument("--interval", type=float, help="Market refresh interval in seconds")
    parser.add_argument("--sample-interval", type=float, default=config.ALERT_SAMPLE_INTERVAL,
                        help="Seconds between whale samples")
    parser.add_argument("--limit", type=int, default=config.DEFAULT_MARKETS_LIMIT,
                        help="Number of markets to poll")
    parser.add_argument("--seed", type=int, help="Seed for the synthetic trade flow")
    parser.add_argument("--settings", default=config.SETTINGS_FILE, help="Settings JSON file")
    parser.add_argument("--once", action="store_true", help="Run a single pass and exit")
    return parser


async def run(args: argparse.Namespace):
    settings = SettingsStore(args.settings)
    current = settings.get_settings()
    if args.threshold is not None:
        current = replace(current, whale_threshold=args.threshold)

    print(f"\n{'='*80}")
    print(f"{Style.BRIGHT}POLYPULSE FLOW MONITOR{Style.RESET_ALL}")
    print(f"{'='*80}")
    print(f"Threshold: {format_large_number(current.whale_threshold)} | "
          f"Refresh: {args.interval or current.auto_refresh_interval / 1000:.0f}s")
    if not current.discord_webhook_url:
        print(f"{Fore.YELLOW}Discord webhook not configured, alerts are printed only{Style.RESET_ALL}")
    print(f"{'='*80}\n")

    async with GammaClient() as gamma, CryptoPriceClient() as prices, \
            DiscordNotifier(current.discord_webhook_url) as notifier:
        monitor = FlowMonitor(
            gamma, prices, notifier, settings,
            flow=SyntheticTradeFlow(seed=args.seed),
            markets_limit=args.limit,
            whale_threshold=args.threshold
        )
        monitor.subscribe(print_alert)

        if args.once:
            await monitor.refresh()
            if monitor.connection_error:
                print(f"{Fore.RED}Connection error: market feed unavailable{Style.RESET_ALL}")
                return
            print_arbitrage(monitor.arbitrage)
            print()
            await monitor.sample_alert()
            return

        monitor.start(refresh_interval=args.interval, sample_interval=args.sample_interval)
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            await monitor.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    init(autoreset=True)
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted by user{Style.RESET_ALL}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
