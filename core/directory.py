"""Accessory directory: where the host keeps one entry per TV.

The fleet reconciler only depends on the AccessoryDirectory protocol.
JsonAccessoryDirectory keeps the entries in a JSON file so inputs and the
last known state survive a restart.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol

from models.capabilities import CapabilitySet
from models.types import DeviceConfig, Favourite

logger = logging.getLogger('bravia.directory')


@dataclass
class AccessoryEntry:
    """One TV as known to the host."""
    identity: str
    name: str
    device: DeviceConfig
    favourites: list[Favourite] = field(default_factory=list)
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)

    def to_dict(self) -> dict:
        return {
            'identity': self.identity,
            'name': self.name,
            'device': self.device.to_dict(),
            'favourites': [f.to_dict() for f in self.favourites],
            'capabilities': self.capabilities.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AccessoryEntry':
        return cls(
            identity=str(data['identity']),
            name=str(data.get('name', '')),
            device=DeviceConfig.from_dict(data.get('device', {})),
            favourites=[Favourite.from_dict(f) for f in data.get('favourites', [])],
            capabilities=CapabilitySet.from_dict(data.get('capabilities')),
        )


class AccessoryDirectory(Protocol):
    """Repository of accessory entries keyed by identity."""

    def find(self, identity: str) -> AccessoryEntry | None: ...

    def upsert(self, entry: AccessoryEntry) -> None: ...

    def remove_batch(self, identities: Iterable[str]) -> None: ...

    def all_ids(self) -> list[str]: ...


class JsonAccessoryDirectory:
    """AccessoryDirectory persisted to a JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._entries: dict[str, AccessoryEntry] = self._load()

    def _load(self) -> dict[str, AccessoryEntry]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable accessories file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring accessories file %s: expected a JSON object", self.path)
            return {}

        items = data.get('accessories')
        if not isinstance(items, list):
            items = []

        entries = {}
        for item in items:
            try:
                entry = AccessoryEntry.from_dict(item)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed accessory entry: %s", e)
                continue
            entries[entry.identity] = entry
        return entries

    def save(self):
        """Write all entries to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'accessories': [e.to_dict() for e in self._entries.values()]}, f, indent=2)

    def find(self, identity: str) -> AccessoryEntry | None:
        return self._entries.get(identity)

    def upsert(self, entry: AccessoryEntry) -> None:
        self._entries[entry.identity] = entry
        self.save()

    def remove_batch(self, identities: Iterable[str]) -> None:
        removed = [i for i in identities if self._entries.pop(i, None) is not None]
        if removed:
            self.save()

    def all_ids(self) -> list[str]:
        return list(self._entries)

    def entries(self) -> list[AccessoryEntry]:
        return list(self._entries.values())
