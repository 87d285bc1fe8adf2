"""
Utility functions for PolyPulse Monitor.
"""

from typing import Any, List, Optional
from datetime import datetime, timezone
import json
import math

from config import POLYMARKET_EVENT_URL


def safe_float(value: Any, default: float = 0.0) -> float:
    """
    Convert an API value to float without raising.

    Args:
        value: Number, numeric string, or anything else
        default: Value returned when conversion fails

    Returns:
        Parsed float or default
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    # NaN and infinities count as missing
    if not math.isfinite(result):
        return default
    return result


def parse_json_list(value: Any) -> List:
    """
    Parse a list field that the Gamma API may return as a JSON string.

    Args:
        value: List, JSON-encoded list string, or None

    Returns:
        List (empty if the value cannot be decoded)
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def format_address(address: str, length: int = 8) -> str:
    """
    Format a wallet address for display.

    Args:
        address: Full wallet address
        length: Number of characters to keep at the start

    Returns:
        Shortened address string
    """
    if len(address) <= length + 4:
        return address
    return f"{address[:length]}...{address[-4:]}"


def format_currency(value: float, decimals: int = 2) -> str:
    """Format a number as USD."""
    return f"${value:,.{decimals}f}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """
    Format a number that is already a percentage.

    Args:
        value: Percentage value (5.0 means 5%)
        decimals: Number of decimal places

    Returns:
        Formatted percentage string
    """
    return f"{value:.{decimals}f}%"


def format_large_number(number: float) -> str:
    """
    Format large numbers with K/M/B suffixes.

    Args:
        number: Number to format

    Returns:
        Formatted string
    """
    if number >= 1_000_000_000:
        return f"${number/1_000_000_000:.1f}B"
    elif number >= 1_000_000:
        return f"${number/1_000_000:.1f}M"
    elif number >= 1_000:
        return f"${number/1_000:.1f}K"
    return f"${number:.2f}"


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to a maximum length, suffix included."""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """
    Get a compact human-readable age for a timestamp.

    Args:
        timestamp: Timezone-aware datetime
        now: Reference time (defaults to current UTC time)

    Returns:
        String such as "5m ago" or "just now"
    """
    now = now or datetime.now(timezone.utc)
    seconds = int((now - timestamp).total_seconds())

    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        return f"{seconds // 60}m ago"
    elif seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def market_url(slug: Optional[str]) -> str:
    """Public Polymarket link for an event slug."""
    if not slug:
        return "https://polymarket.com"
    return f"{POLYMARKET_EVENT_URL}/{slug}"
