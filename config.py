"""
Configuration settings for PolyPulse Monitor.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Project paths
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"

# API Configuration
GAMMA_API_BASE_URL = os.getenv("GAMMA_API_BASE_URL", "https://gamma-api.polymarket.com")
COINGECKO_API_URL = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3/simple/price")
POLYMARKET_EVENT_URL = "https://polymarket.com/event"
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "10"))  # seconds

# Tracked spot assets (CoinGecko id -> display symbol)
CRYPTO_ASSETS = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "solana": "SOL",
    "binancecoin": "BNB"
}

# Dashboard Settings
DEFAULT_MARKETS_LIMIT = int(os.getenv("DEFAULT_MARKETS_LIMIT", "60"))
DEFAULT_REFRESH_INTERVAL_MS = int(os.getenv("AUTO_REFRESH_INTERVAL_MS", "30000"))
ALERT_SAMPLE_INTERVAL = 8  # seconds

# Display Configuration
MAX_QUESTION_LENGTH = 100

# Whale Alert Configuration
DEFAULT_WHALE_THRESHOLD = float(os.getenv("WHALE_THRESHOLD", "25000"))
WHALE_CANDIDATE_WINDOW = 20
WHALE_HIGH_VOLUME_CUTOFF = 1_000_000
WHALE_FLOOR_HIGH_VOLUME = 50_000
WHALE_FLOOR_DEFAULT = 10_000

# Arbitrage Configuration
ARB_LOWER_BOUND = 0.96
ARB_UPPER_BOUND = 1.04
ARB_HIGH_SEVERITY_BELOW = 0.98
ARB_MAX_SIGNALS = 5
ARB_MIN_OUTCOMES = 2

# History capacities
ALERT_FEED_CAPACITY = 50
LOG_HISTORY_CAPACITY = 200

# Notifications
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL", "")
DISCORD_URL_PREFIX = "https://discord.com"

# Settings persistence
SETTINGS_FILE = os.getenv("SETTINGS_FILE", str(DATA_DIR / "settings.json"))

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
