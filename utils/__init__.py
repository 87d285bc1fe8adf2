"""
Utility functions package.
"""

from .helpers import (
    safe_float,
    parse_json_list,
    format_address,
    format_currency,
    format_percentage,
    format_large_number,
    truncate_text,
    time_ago,
    market_url
)

__all__ = [
    'safe_float',
    'parse_json_list',
    'format_address',
    'format_currency',
    'format_percentage',
    'format_large_number',
    'truncate_text',
    'time_ago',
    'market_url'
]
