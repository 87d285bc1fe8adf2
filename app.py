"""
PolyPulse Dashboard - Market Flow & Arbitrage Monitor
Live Polymarket markets with outcome-sum arbitrage signals and whale alerts.
"""

import streamlit as st
from datetime import datetime
from dataclasses import replace
import asyncio
from typing import List, Optional, Tuple
import logging
import time

import config

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

# Configure page
st.set_page_config(
    page_title="PolyPulse Monitor",
    page_icon="🐋",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Import modules
from algorithms.arbitrage_detector import Severity, check_single_market_arbitrage, detect_arbitrage
from algorithms.market_snapshot import MarketSnapshot
from algorithms.whale_sampler import MIN_ADDRESS_LENGTH, Side, SyntheticTradeFlow, TradeAlert, is_alert_worthy
from clients.crypto_client import CryptoPriceClient, PriceQuote
from clients.gamma_client import GammaClient
from clients.webhook_client import DiscordNotifier
from data.alert_ledger import AlertLedger
from utils.helpers import (
    format_address,
    format_currency,
    format_large_number,
    format_percentage,
    market_url,
    time_ago,
    truncate_text
)
from utils.log_buffer import LogBuffer
from utils.settings_store import SettingsStore


@st.cache_resource
def get_log_buffer() -> LogBuffer:
    """Attach one log buffer to the root logger per server process."""
    buffer = LogBuffer(config.LOG_HISTORY_CAPACITY)
    buffer.setLevel(logging.INFO)
    logging.getLogger().addHandler(buffer)
    return buffer


@st.cache_resource
def get_settings_store() -> SettingsStore:
    return SettingsStore(config.SETTINGS_FILE)


log_buffer = get_log_buffer()
store = get_settings_store()


@st.cache_data(ttl=15)
def load_snapshot(limit: int) -> Tuple[List[MarketSnapshot], List[PriceQuote]]:
    """Fetch markets and spot prices in parallel."""
    async def fetch():
        async with GammaClient() as gamma, CryptoPriceClient() as prices:
            return await asyncio.gather(gamma.get_active_markets(limit), prices.get_prices())

    try:
        markets, quotes = asyncio.run(fetch())
        return markets, quotes
    except Exception as e:
        logger.error(f"SYNC_FAILURE: {e}")
        return [], []


def dispatch_alert(alert: TradeAlert, market: Optional[MarketSnapshot], webhook_url: str) -> bool:
    """Send an alert to Discord without letting failures reach the page."""
    async def send():
        async with DiscordNotifier(webhook_url) as notifier:
            return await notifier.send_alert(alert, market)

    try:
        return asyncio.run(send())
    except Exception as e:
        logger.error(f"Notification dispatch failed: {e}")
        return False


def init_session_state():
    if "alerts" not in st.session_state:
        st.session_state["alerts"] = AlertLedger(config.ALERT_FEED_CAPACITY)
    if "flow" not in st.session_state:
        st.session_state["flow"] = SyntheticTradeFlow()


def render_sidebar():
    """Sidebar settings, persisted to the settings store."""
    settings = store.get_settings()

    st.sidebar.title("PolyPulse")
    st.sidebar.markdown("Market flow surveillance")
    st.sidebar.markdown("---")
    st.sidebar.markdown("**⚙️ Automation**")

    threshold = st.sidebar.slider(
        "Whale Threshold (USDC)",
        min_value=1000,
        max_value=500000,
        step=5000,
        value=int(settings.whale_threshold)
    )
    webhook = st.sidebar.text_input(
        "Discord Webhook URL",
        value=settings.discord_webhook_url,
        placeholder="https://discord.com/api/webhooks/...",
        type="password"
    )
    refresh_s = st.sidebar.number_input(
        "Refresh Interval (s)",
        min_value=5,
        max_value=600,
        value=max(5, settings.auto_refresh_interval // 1000)
    )

    updated = replace(
        settings,
        whale_threshold=float(threshold),
        discord_webhook_url=webhook.strip(),
        auto_refresh_interval=int(refresh_s) * 1000
    )
    if updated != settings:
        store.save_settings(updated)
        logger.info("Settings updated")

    st.sidebar.markdown("---")
    auto_refresh = st.sidebar.checkbox(f"🔄 Auto-refresh ({int(refresh_s)}s)", value=False)
    if st.sidebar.button("🔄 Refresh Now", use_container_width=True):
        st.cache_data.clear()
        st.rerun()
    st.sidebar.caption(f"Updated: {datetime.now().strftime('%H:%M:%S')}")

    return updated, auto_refresh


def sample_flow(markets: List[MarketSnapshot], settings):
    """Sample one trade into the alert feed, notifying if it crosses the threshold."""
    alert = st.session_state["flow"].sample_alert(markets)
    if alert is None:
        return
    st.session_state["alerts"] = st.session_state["alerts"].push(alert)

    if is_alert_worthy(alert, settings.whale_threshold):
        logger.warning(f"LARGE_ORDER: {alert.side.value} {alert.size:,.0f}")
        market = next((m for m in markets if m.id == alert.market_id), None)
        dispatch_alert(alert, market, settings.discord_webhook_url)


def render_prices(quotes: List[PriceQuote]):
    if not quotes:
        st.caption("Spot prices unavailable")
        return
    cols = st.columns(len(quotes))
    for col, quote in zip(cols, quotes):
        with col:
            st.metric(quote.symbol, format_currency(quote.price), f"{quote.change_24h:+.2f}%")


def render_markets(markets: List[MarketSnapshot]):
    """Market table plus a detail view with the single-market check."""
    rows = [
        {
            "Market": truncate_text(m.name, config.MAX_QUESTION_LENGTH),
            "Prices": " / ".join(f"{o} {p:.2f}" for o, p in zip(m.outcomes, m.outcome_prices)),
            "Book Sum": format_percentage(m.price_sum * 100),
            "Volume": format_large_number(m.volume),
            "Liquidity": format_large_number(m.liquidity)
        }
        for m in markets
    ]
    st.dataframe(rows, use_container_width=True, hide_index=True)

    selected = st.selectbox("Market detail", markets, format_func=lambda m: truncate_text(m.name, 90))
    if selected:
        st.markdown(f"[Open on Polymarket]({market_url(selected.slug)})")
        signal = check_single_market_arbitrage(selected)
        if signal:
            st.warning(f"**{signal.severity.value}** · {signal.description} "
                       f"Expected return {format_percentage(signal.expected_return, 2)}")
        else:
            st.success("Outcome prices within tolerance")

        trades = st.session_state["flow"].market_trades(selected)
        st.dataframe(
            [
                {
                    "Time": time_ago(t.timestamp),
                    "Side": t.side.value,
                    "Size": format_currency(t.size, 0),
                    "Price": f"{t.price:.3f}",
                    "Wallet": format_address(t.address)
                }
                for t in trades
            ],
            use_container_width=True,
            hide_index=True
        )


def render_arbitrage(markets: List[MarketSnapshot]):
    signals = detect_arbitrage(markets)
    if not signals:
        st.info("🎯 No outcome-sum discrepancies. Markets look efficient.")
        return
    for signal in signals:
        icon = "🔴" if signal.severity == Severity.HIGH else "🟡"
        st.markdown(
            f"{icon} **{signal.severity.value}** · "
            f"**{format_percentage(signal.expected_return, 2)}** · "
            f"{signal.market_name}  \n"
            f"<span style='color:#7f8c8d;font-size:0.8rem'>{signal.description}</span>",
            unsafe_allow_html=True
        )


def render_alerts(ledger: AlertLedger, threshold: float):
    st.caption(f"Last {ledger.capacity} sampled trades · threshold {format_large_number(threshold)}")
    if not ledger:
        st.info("Listening for volume anomalies...")
        return
    for alert in ledger:
        color = "#2ecc71" if alert.side == Side.BUY else "#e74c3c"
        badge = "🐋 " if is_alert_worthy(alert, threshold) else ""
        st.markdown(
            f"<div style='border-left:4px solid {color};padding:0.2rem 0.6rem;margin-bottom:0.3rem'>"
            f"{badge}<b style='color:{color}'>{alert.side.value}</b> "
            f"{format_currency(alert.size, 0)} @ {alert.price:.3f} · "
            f"{truncate_text(alert.market_name, 80)} · "
            f"<code>{format_address(alert.address)}</code> · {time_ago(alert.timestamp)}</div>",
            unsafe_allow_html=True
        )


def render_wallet(markets: List[MarketSnapshot]):
    saved = store.get_saved_addresses()
    address = st.text_input("Wallet address", placeholder="0x...")
    if saved:
        picked = st.selectbox("Saved wallets", [""] + saved)
        address = address or picked
    if not address or len(address) < MIN_ADDRESS_LENGTH:
        return

    stats = st.session_state["flow"].address_stats(address)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Tier", stats.tier.value)
    col2.metric("Win Rate", format_percentage(stats.win_rate * 100))
    col3.metric("Volume", format_large_number(stats.total_volume))
    col4.metric("PnL", format_large_number(stats.pnl))
    st.caption(f"{stats.total_trades} trades")

    history = st.session_state["flow"].address_trades(address, markets)
    st.markdown("**Recent activity**")
    st.dataframe(
        [
            {
                "Time": time_ago(t.timestamp),
                "Market": truncate_text(t.market_name, 70),
                "Side": t.side.value,
                "Size": format_currency(t.size, 0),
                "Price": f"{t.price:.3f}"
            }
            for t in history
        ],
        use_container_width=True,
        hide_index=True
    )

    if address.lower() in saved:
        if st.button("Remove from saved"):
            store.remove_address(address)
            st.rerun()
    elif st.button("Save wallet"):
        store.save_address(address)
        st.rerun()


def render_logs():
    level = st.selectbox("Level", ["ALL", "INFO", "WARNING", "ERROR"], index=0)
    entries = log_buffer.entries(None if level == "ALL" else level)
    st.caption(f"{len(entries)} of last {log_buffer.capacity} entries")
    st.code(
        "\n".join(
            f"[{e.timestamp.strftime('%H:%M:%S')}] [{e.level}] [{e.module}] {e.message}"
            for e in entries
        ) or "No log entries",
        language=None
    )


def main():
    """Main application entry point."""
    init_session_state()
    settings, auto_refresh = render_sidebar()

    markets, quotes = load_snapshot(config.DEFAULT_MARKETS_LIMIT)
    if not markets:
        st.error("Connection error: market feed unavailable. Retrying on next refresh.")
    else:
        sample_flow(markets, settings)

    render_prices(quotes)

    tab_markets, tab_arb, tab_alerts, tab_wallet, tab_logs = st.tabs(
        ["📈 Markets", "⚖️ Arbitrage", "🐋 Whale Alerts", "🔎 Wallet", "📜 Logs"]
    )
    with tab_markets:
        if markets:
            render_markets(markets)
    with tab_arb:
        render_arbitrage(markets)
    with tab_alerts:
        render_alerts(st.session_state["alerts"], settings.whale_threshold)
    with tab_wallet:
        render_wallet(markets)
    with tab_logs:
        render_logs()

    if auto_refresh:
        time.sleep(settings.auto_refresh_interval / 1000)
        st.cache_data.clear()
        st.rerun()


if __name__ == "__main__":
    main()
