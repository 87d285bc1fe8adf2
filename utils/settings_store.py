"""
Persistent user settings and saved wallet addresses.
"""

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional
from pathlib import Path
import logging

import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppSettings:
    """User-tunable settings shared by the dashboard and the monitor."""

    whale_threshold: float = config.DEFAULT_WHALE_THRESHOLD
    auto_refresh_interval: int = config.DEFAULT_REFRESH_INTERVAL_MS  # milliseconds
    discord_webhook_url: str = config.DISCORD_WEBHOOK_URL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        """Merge stored values over defaults, ignoring unknown or invalid entries."""
        defaults = cls()
        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            try:
                if f.name == "whale_threshold":
                    value = float(raw)
                    if value <= 0:
                        raise ValueError(value)
                elif f.name == "auto_refresh_interval":
                    value = int(raw)
                    if value <= 0:
                        raise ValueError(value)
                else:
                    value = str(raw)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid setting {f.name}={raw!r}")
                continue
            values[f.name] = value
        return cls(**{**asdict(defaults), **values})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SettingsStore:
    """Flat JSON key-value store for settings and saved addresses."""

    SETTINGS_KEY = "settings"
    ADDRESSES_KEY = "saved_addresses"

    def __init__(self, config_file: str = config.SETTINGS_FILE):
        """
        Initialize the settings store.

        Args:
            config_file: Path to the settings JSON file
        """
        self.config_file = config_file
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load the settings blob from disk."""
        try:
            if Path(self.config_file).exists():
                with open(self.config_file, 'r') as f:
                    data = json.load(f)
                self._data = data if isinstance(data, dict) else {}
                logger.info(f"Loaded settings from {self.config_file}")
            else:
                logger.info(f"Settings file not found, using defaults: {self.config_file}")
                self._data = {}
        except (OSError, ValueError) as e:
            logger.error(f"Error loading settings: {e}")
            self._data = {}

    def _save(self):
        """Write the settings blob to disk."""
        try:
            Path(self.config_file).parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Read an arbitrary stored value."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any):
        """Store an arbitrary JSON-serializable value."""
        self._data[key] = value
        self._save()

    def get_settings(self) -> AppSettings:
        """
        Get current settings.

        Returns:
            Stored settings merged over defaults
        """
        stored = self._data.get(self.SETTINGS_KEY)
        if not isinstance(stored, dict):
            return AppSettings()
        return AppSettings.from_dict(stored)

    def save_settings(self, settings: AppSettings):
        self.set(self.SETTINGS_KEY, settings.to_dict())

    def get_saved_addresses(self) -> List[str]:
        """
        Get saved wallet addresses.

        Returns:
            List of lower-cased addresses in the order they were saved
        """
        addresses = self._data.get(self.ADDRESSES_KEY)
        if not isinstance(addresses, list):
            return []
        return [a for a in addresses if isinstance(a, str)]

    def save_address(self, address: str) -> bool:
        """
        Save a wallet address.

        Args:
            address: Wallet address (stored lower-cased)

        Returns:
            True if added, False if already saved
        """
        address = address.lower()
        addresses = self.get_saved_addresses()
        if address in addresses:
            return False
        self.set(self.ADDRESSES_KEY, addresses + [address])
        return True

    def remove_address(self, address: str) -> bool:
        """
        Remove a saved wallet address.

        Returns:
            True if removed, False if not found
        """
        address = address.lower()
        addresses = self.get_saved_addresses()
        if address not in addresses:
            return False
        self.set(self.ADDRESSES_KEY, [a for a in addresses if a != address])
        return True

    def whale_threshold(self) -> float:
        return self.get_settings().whale_threshold
