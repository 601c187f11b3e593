"""Utility functions for the Bravia favourites bridge.

This module contains helper functions used across the application:
- normalise_channel_number: Canonical decimal form of a channel number
- is_tunable_number: Whether a channel number can become an input identifier
- device_identity: Stable directory key for a configured TV
- power_label: Human-readable power state
"""

import re
import uuid

MAX_IDENTIFIER = 999

_DIGITS = re.compile(r'^[0-9]+$')


def normalise_channel_number(value) -> str | None:
    """Convert a channel number to its canonical decimal string.

    Leading zeros are stripped ("007" -> "7", "000" -> "0"). Ints are accepted.

    Returns:
        Canonical string, or None if the value is not all digits
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not _DIGITS.match(text):
        return None
    return text.lstrip('0') or '0'


def is_tunable_number(number: str) -> bool:
    """Check whether a normalised channel number fits the 1-999 identifier range."""
    normalised = normalise_channel_number(number)
    if normalised is None:
        return False
    if len(normalised) > len(str(MAX_IDENTIFIER)):
        return False
    return 1 <= int(normalised) <= MAX_IDENTIFIER


def device_identity(name: str, ip: str) -> str:
    """Derive the stable directory identity for a TV from its name and IP.

    The same (name, ip) pair always yields the same identity, so renaming a
    TV or moving it to a new address creates a new directory entry.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{name}-BraviaFavourites-{ip}"))


def power_label(power: bool | None) -> str:
    """Format a power state for display."""
    if power is None:
        return 'UNKNOWN'
    return 'ON' if power else 'OFF'
