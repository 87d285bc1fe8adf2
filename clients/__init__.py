"""
API clients package: market data, spot prices and alert delivery.
"""

from .gamma_client import GammaClient
from .crypto_client import CryptoPriceClient, PriceQuote
from .webhook_client import DiscordNotifier, build_embed

__all__ = [
    'GammaClient',
    'CryptoPriceClient',
    'PriceQuote',
    'DiscordNotifier',
    'build_embed'
]
