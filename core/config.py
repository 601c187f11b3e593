"""Configuration management and 1Password integration.

This module handles:
- Loading/saving the platform configuration file
- 1Password CLI lookup for the TV pre-shared key
- Validation of the per-TV settings
"""

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from core.errors import ConfigError
from models.favourites import DEFAULT_MAX_FAVOURITES
from models.types import DeviceConfig

logger = logging.getLogger('bravia.config')

# Configuration file paths
CONFIG_DIR = Path.home() / '.bravia_favourites'
USER_CONFIG_FILE = CONFIG_DIR / 'config.json'
DEFAULT_FAVOURITES_FILE = CONFIG_DIR / 'favourites.txt'
DEFAULT_ACCESSORIES_FILE = CONFIG_DIR / 'accessories.json'

DEFAULT_POLL_INTERVAL_MS = 5000


@dataclass
class PlatformConfig:
    """Settings shared by every TV plus the raw per-TV entries."""
    psk: str
    tvs: list[dict]
    favourites_file: Path = DEFAULT_FAVOURITES_FILE
    accessories_file: Path = DEFAULT_ACCESSORIES_FILE
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    max_favourites: int = DEFAULT_MAX_FAVOURITES
    debug: bool = False

    def find_device(self, name: str) -> DeviceConfig | None:
        """Find a configured TV by name (case-insensitive)."""
        for raw in self.tvs:
            if not isinstance(raw, dict):
                continue
            device = DeviceConfig.from_dict(raw)
            if device.name.lower() == name.lower() and device.ip:
                return device
        return None


def is_op_available() -> bool:
    """Check if 1Password CLI is available."""
    try:
        result = subprocess.run(['op', '--version'],
                                capture_output=True,
                                timeout=2)
        return result.returncode == 0
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return False


def load_psk_from_1password() -> str | None:
    """Load the TV pre-shared key from 1Password.

    Reads vault and item names from environment variables:
    - BRAVIA_1PASSWORD_VAULT (default: "Private")
    - BRAVIA_1PASSWORD_ITEM (default: "Bravia")

    The item is expected to have a "psk" field.

    Returns:
        The key, or None if 1Password is unavailable or the lookup fails
    """
    if not is_op_available():
        return None

    vault = os.getenv('BRAVIA_1PASSWORD_VAULT', 'Private')
    item = os.getenv('BRAVIA_1PASSWORD_ITEM', 'Bravia')

    try:
        result = subprocess.run(
            ['op', 'item', 'get', item,
             '--vault', vault,
             '--fields', 'psk',
             '--reveal'],
            capture_output=True,
            text=True,
            timeout=10
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.warning("Failed to load psk from 1Password: %s", e)
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def load_config_file(path: Path | str = USER_CONFIG_FILE) -> dict:
    """Read the raw configuration dict.

    Raises:
        ConfigError: File missing, unreadable or not a JSON object
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to read config from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _positive_int(value, default: int, key: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        logger.warning("Ignoring invalid %s=%r, using %d", key, value, default)
        return default
    return int(value)


def parse_platform_config(data: dict, psk_lookup=load_psk_from_1password) -> PlatformConfig:
    """Validate a raw configuration dict.

    Credential priority for the pre-shared key:
    1. 'psk' in the config file
    2. 1Password (if available and configured)

    Args:
        data: Parsed config file
        psk_lookup: Fallback used when the file has no psk

    Raises:
        ConfigError: Missing psk or no TVs configured
    """
    psk = str(data.get('psk') or '').strip()
    if not psk:
        psk = psk_lookup() or ''
    if not psk:
        raise ConfigError("Missing required config: psk")

    tvs = data.get('tvs')
    if not isinstance(tvs, list) or not tvs:
        raise ConfigError("No TVs configured.")

    return PlatformConfig(
        psk=psk,
        tvs=tvs,
        favourites_file=Path(data.get('favouritesFile') or DEFAULT_FAVOURITES_FILE).expanduser(),
        accessories_file=Path(data.get('accessoriesFile') or DEFAULT_ACCESSORIES_FILE).expanduser(),
        poll_interval_ms=_positive_int(data.get('pollIntervalMs'), DEFAULT_POLL_INTERVAL_MS, 'pollIntervalMs'),
        max_favourites=_positive_int(data.get('maxFavourites'), DEFAULT_MAX_FAVOURITES, 'maxFavourites'),
        debug=bool(data.get('debug', False)),
    )


def load_platform_config(path: Path | str = USER_CONFIG_FILE) -> PlatformConfig:
    """Load and validate the platform configuration file."""
    return parse_platform_config(load_config_file(path))


def save_platform_config(data: dict, path: Path | str = USER_CONFIG_FILE):
    """Save a raw configuration dict.

    Creates the config directory if needed and restricts the file to the
    current user, since it may hold the pre-shared key.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)

    os.chmod(path, 0o600)
